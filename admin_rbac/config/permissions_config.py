"""
Permissions and Roles Configuration
This config defines the permission catalog for every admin module and the system roles.
Used by the auto-seeder and the seed script to populate permissions, roles and role_permissions.
"""

from typing import Dict, List

# Define modules and their actions
# Each action maps to (display_name, description)
MODULES = {
    "products": {
        "resource": "products",
        "category": "Products",
        "actions": {
            "view": ("View Products", "View product listings and details"),
            "create": ("Create Products", "Add new products to the catalog"),
            "edit": ("Edit Products", "Modify existing product information"),
            "delete": ("Delete Products", "Soft delete products (can be restored)"),
            "restore": ("Restore Products", "Restore soft-deleted products"),
            "permanent_delete": ("Permanently Delete Products", "Permanently remove products from the database"),
            "bulk_operations": ("Bulk Product Operations", "Perform bulk actions on multiple products"),
        },
        "sensitive": ["permanent_delete"],
    },
    "categories": {
        "resource": "categories",
        "category": "Categories",
        "actions": {
            "view": ("View Categories", "View category listings and details"),
            "create": ("Create Categories", "Add new categories"),
            "edit": ("Edit Categories", "Modify existing categories"),
            "delete": ("Delete Categories", "Soft delete categories"),
            "restore": ("Restore Categories", "Restore soft-deleted categories"),
            "permanent_delete": ("Permanently Delete Categories", "Permanently remove categories from the database"),
        },
        "sensitive": ["permanent_delete"],
    },
    "collections": {
        "resource": "collections",
        "category": "Collections",
        "actions": {
            "view": ("View Collections", "View collection listings and details"),
            "create": ("Create Collections", "Add new collections"),
            "edit": ("Edit Collections", "Modify existing collections"),
            "delete": ("Delete Collections", "Soft delete collections"),
            "restore": ("Restore Collections", "Restore soft-deleted collections"),
            "toggle_status": ("Toggle Collection Status", "Enable or disable collections"),
        },
        "sensitive": [],
    },
    "orders": {
        "resource": "orders",
        "category": "Orders",
        "actions": {
            "view": ("View Orders", "View order listings and details"),
            "create": ("Create Orders", "Create new orders manually"),
            "edit": ("Edit Orders", "Modify existing orders"),
            "delete": ("Delete Orders", "Soft delete orders"),
            "restore": ("Restore Orders", "Restore soft-deleted orders"),
            "change_status": ("Change Order Status", "Update order fulfillment status"),
            "manage_shipments": ("Manage Shipments", "Create and manage delivery shipments"),
        },
        "sensitive": [],
    },
    "customers": {
        "resource": "customers",
        "category": "Customers",
        "actions": {
            "view": ("View Customers", "View customer listings and details"),
            "create": ("Create Customers", "Add new customers manually"),
            "edit": ("Edit Customers", "Modify customer information"),
            "delete": ("Delete Customers", "Delete customers from the system"),
            "view_history": ("View Customer History", "Access customer order and edit history"),
            "sync": ("Sync Customers", "Synchronize customers with external systems"),
        },
        "sensitive": [],
    },
    "discounts": {
        "resource": "discounts",
        "category": "Discounts",
        "actions": {
            "view": ("View Discounts", "View discount codes and campaigns"),
            "create": ("Create Discounts", "Create new discount codes"),
            "edit": ("Edit Discounts", "Modify existing discounts"),
            "delete": ("Delete Discounts", "Delete discount codes"),
            "toggle_status": ("Toggle Discount Status", "Enable or disable discounts"),
        },
        "sensitive": ["view", "create", "edit", "delete", "toggle_status"],
    },
    "pages": {
        "resource": "pages",
        "category": "Pages",
        "actions": {
            "view": ("View Pages", "View content pages"),
            "create": ("Create Pages", "Create new content pages"),
            "edit": ("Edit Pages", "Modify existing pages"),
            "delete": ("Delete Pages", "Delete content pages"),
            "publish": ("Publish Pages", "Publish or unpublish pages"),
        },
        "sensitive": [],
    },
    "widgets": {
        "resource": "widgets",
        "category": "Widgets",
        "actions": {
            "view": ("View Widgets", "View widget listings"),
            "create": ("Create Widgets", "Create new widgets"),
            "edit": ("Edit Widgets", "Modify existing widgets"),
            "delete": ("Delete Widgets", "Delete widgets"),
            "toggle_status": ("Toggle Widget Status", "Enable or disable widgets"),
        },
        "sensitive": [],
    },
    "media": {
        "resource": "media",
        "category": "Media",
        "actions": {
            "view": ("View Media", "Browse media library"),
            "upload": ("Upload Media", "Upload files to media library"),
            "delete": ("Delete Media", "Delete files from media library"),
            "manage_folders": ("Manage Folders", "Create and manage media folders"),
        },
        "sensitive": [],
    },
    "attributes": {
        "resource": "attributes",
        "category": "Attributes",
        "actions": {
            "view": ("View Attributes", "View product attributes"),
            "create": ("Create Attributes", "Create new product attributes"),
            "edit": ("Edit Attributes", "Modify existing attributes"),
            "delete": ("Delete Attributes", "Delete product attributes"),
        },
        "sensitive": [],
    },
    "analytics": {
        "resource": "analytics",
        "category": "Analytics",
        "actions": {
            "view": ("View Analytics", "View analytics integrations"),
            "create": ("Create Analytics", "Add new analytics integrations"),
            "edit": ("Edit Analytics", "Modify analytics configurations"),
            "toggle": ("Toggle Analytics", "Enable or disable analytics integrations"),
        },
        "sensitive": [],
    },
    "settings": {
        "resource": "settings",
        "category": "Settings",
        "actions": {
            "general.view": ("View General Settings", "View store general settings"),
            "general.edit": ("Edit General Settings", "Modify store general settings"),
            "header.edit": ("Edit Header", "Modify site header configuration"),
            "footer.edit": ("Edit Footer", "Modify site footer configuration"),
            "seo.edit": ("Edit SEO Settings", "Modify site SEO configuration"),
            "notifications.edit": ("Edit Notifications", "Modify notification settings"),
            "delivery_locations.view": ("View Delivery Locations", "View delivery location settings"),
            "delivery_locations.edit": ("Edit Delivery Locations", "Modify delivery location settings"),
            "delivery_providers.view": ("View Delivery Providers", "View delivery provider configurations"),
            "delivery_providers.edit": ("Edit Delivery Providers", "Modify delivery provider credentials and settings"),
            "shipping_methods.view": ("View Shipping Methods", "View shipping method settings"),
            "shipping_methods.edit": ("Edit Shipping Methods", "Modify shipping methods and fees"),
            "fraud_checker.view": ("View Fraud Checker", "View fraud detection settings"),
            "fraud_checker.edit": ("Edit Fraud Checker", "Modify fraud detection rules"),
            "cache.view": ("View Cache", "View cache status"),
            "cache.manage": ("Manage Cache", "Clear and manage cache"),
        },
        "sensitive": [
            "general.view",
            "general.edit",
            "delivery_providers.view",
            "delivery_providers.edit",
            "fraud_checker.view",
            "fraud_checker.edit",
        ],
    },
    "team": {
        "resource": "team",
        "category": "Team",
        "actions": {
            "view": ("View Team", "View team members"),
            "manage": ("Manage Team", "Add and remove team members"),
            "manage_roles": ("Manage Roles", "Create, edit, and assign roles and permissions"),
        },
        "sensitive": ["manage", "manage_roles"],
    },
    "dashboard": {
        "resource": "dashboard",
        "category": "Dashboard",
        "actions": {
            "view": ("View Dashboard", "Access the admin dashboard"),
            "analytics": ("View Dashboard Analytics", "View analytics on the dashboard"),
        },
        "sensitive": [],
    },
}

CATEGORIES = [module_config["category"] for module_config in MODULES.values()]


def get_all_permissions() -> List[Dict]:
    """
    Returns the permission catalog as a list of metadata dicts.
    Format: [
        {
            "name": "orders.delete",
            "display_name": "Delete Orders",
            "description": "...",
            "resource": "orders",
            "action": "delete",
            "category": "Orders",
            "is_sensitive": False
        },
        ...
    ]
    """
    permissions = []
    for module_config in MODULES.values():
        resource = module_config["resource"]
        for action, (display_name, description) in module_config["actions"].items():
            permissions.append({
                "name": f"{resource}.{action}",
                "display_name": display_name,
                "description": description,
                "resource": resource,
                "action": action,
                "category": module_config["category"],
                "is_sensitive": action in module_config["sensitive"],
            })
    return permissions


def get_all_permission_names() -> List[str]:
    return [perm["name"] for perm in get_all_permissions()]


def get_permissions_by_category() -> Dict[str, List[Dict]]:
    """Group the catalog by category, keeping every category key even when empty"""
    grouped: Dict[str, List[Dict]] = {category: [] for category in CATEGORIES}
    for perm in get_all_permissions():
        grouped[perm["category"]].append(perm)
    return grouped


def is_sensitive_permission(permission: str) -> bool:
    return PERMISSION_METADATA.get(permission, {}).get("is_sensitive", False)


def _manager_permissions(names: List[str]) -> List[str]:
    excluded = {
        "settings.delivery_providers.edit",
        "settings.fraud_checker.edit",
        "team.manage_roles",
    }
    return [n for n in names if "permanent_delete" not in n and n not in excluded]


def get_system_roles() -> List[Dict]:
    """
    System roles seeded on first run. Each role lists permission names;
    names missing from the permissions table are skipped when linking.
    """
    all_names = get_all_permission_names()
    return [
        {
            "name": "super_admin",
            "display_name": "Super Admin",
            "description": "Full access to all features and settings.",
            "permissions": all_names,
        },
        {
            "name": "manager",
            "display_name": "Manager",
            "description": "Full access except sensitive settings and role management.",
            "permissions": _manager_permissions(all_names),
        },
        {
            "name": "sales_rep",
            "display_name": "Sales Representative",
            "description": "Access to orders, customers, and product viewing.",
            "permissions": [
                "dashboard.view",
                "products.view",
                "categories.view",
                "collections.view",
                "orders.view",
                "orders.create",
                "orders.edit",
                "orders.delete",
                "orders.restore",
                "orders.change_status",
                "orders.manage_shipments",
                "customers.view",
                "customers.create",
                "customers.edit",
                "customers.view_history",
                "discounts.view",
            ],
        },
        {
            "name": "content_editor",
            "display_name": "Content Editor",
            "description": "Access to pages, widgets, media, and content settings.",
            "permissions": [
                "dashboard.view",
                "pages.view",
                "pages.create",
                "pages.edit",
                "pages.delete",
                "pages.publish",
                "widgets.view",
                "widgets.create",
                "widgets.edit",
                "widgets.delete",
                "widgets.toggle_status",
                "media.view",
                "media.upload",
                "media.delete",
                "media.manage_folders",
                "collections.view",
                "collections.edit",
                "collections.toggle_status",
                "settings.header.edit",
                "settings.footer.edit",
                "settings.seo.edit",
            ],
        },
        {
            "name": "product_specialist",
            "display_name": "Product Specialist",
            "description": "Full access to products, categories, collections, and attributes.",
            "permissions": [
                "dashboard.view",
                "products.view",
                "products.create",
                "products.edit",
                "products.delete",
                "products.restore",
                "products.bulk_operations",
                "categories.view",
                "categories.create",
                "categories.edit",
                "categories.delete",
                "categories.restore",
                "collections.view",
                "collections.create",
                "collections.edit",
                "collections.delete",
                "collections.restore",
                "collections.toggle_status",
                "attributes.view",
                "attributes.create",
                "attributes.edit",
                "attributes.delete",
                "media.view",
                "media.upload",
            ],
        },
    ]


# Export the catalog for use by the seeder and route tables
PERMISSION_METADATA = {perm["name"]: perm for perm in get_all_permissions()}
SYSTEM_ROLES = get_system_roles()
