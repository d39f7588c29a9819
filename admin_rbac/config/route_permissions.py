"""
API route and admin page permission tables.

Keys are URL patterns where "*" matches within a single path segment.
Values map an HTTP method to a single permission name or to an
any_of(...) / all_of(...) expression. Routes and methods not listed
here are not restricted by the route table.
"""

from typing import AbstractSet, Optional

from admin_rbac.core.routing import PermissionRequirement, RouteTable, any_of, normalize_path

ROUTE_PERMISSIONS = {
    # Products API
    "/api/products": {
        "GET": "products.view",
        "POST": "products.create",
    },
    "/api/products/bulk-delete": {
        "POST": "products.bulk_operations",
        "DELETE": "products.bulk_operations",
    },
    "/api/products/*": {
        "GET": "products.view",
        "PUT": "products.edit",
        "PATCH": "products.edit",
        "DELETE": "products.delete",
    },
    "/api/products/*/restore": {
        "POST": "products.restore",
    },
    "/api/products/*/permanent": {
        "DELETE": "products.permanent_delete",
    },
    "/api/products/*/variants": {
        "GET": "products.view",
        "POST": "products.edit",
    },
    "/api/products/*/variants/*": {
        "GET": "products.view",
        "PUT": "products.edit",
        "PATCH": "products.edit",
        "DELETE": "products.edit",
    },
    "/api/products/*/variants/bulk-create": {
        "POST": "products.edit",
    },
    "/api/products/*/variants/bulk-delete": {
        "POST": "products.edit",
        "DELETE": "products.edit",
    },
    "/api/products/*/variants/sort-order": {
        "PUT": "products.edit",
        "PATCH": "products.edit",
    },
    "/api/products/*/variants/*/duplicate": {
        "POST": "products.edit",
    },

    # Categories API
    "/api/categories": {
        "GET": "categories.view",
        "POST": "categories.create",
    },
    "/api/categories/bulk-delete": {
        "POST": "categories.delete",
        "DELETE": "categories.delete",
    },
    "/api/categories/bulk-restore": {
        "POST": "categories.restore",
    },
    "/api/categories/*": {
        "GET": "categories.view",
        "PUT": "categories.edit",
        "PATCH": "categories.edit",
        "DELETE": "categories.delete",
    },
    "/api/categories/*/restore": {
        "POST": "categories.restore",
    },
    "/api/categories/*/permanent": {
        "DELETE": "categories.permanent_delete",
    },

    # Collections API
    "/api/collections": {
        "GET": "collections.view",
        "POST": "collections.create",
    },
    "/api/collections/bulk-activate": {
        "POST": "collections.toggle_status",
    },
    "/api/collections/bulk-deactivate": {
        "POST": "collections.toggle_status",
    },
    "/api/collections/bulk-delete": {
        "POST": "collections.delete",
        "DELETE": "collections.delete",
    },
    "/api/collections/bulk-restore": {
        "POST": "collections.restore",
    },
    "/api/collections/*": {
        "GET": "collections.view",
        "PUT": "collections.edit",
        "PATCH": "collections.edit",
        "DELETE": "collections.delete",
    },
    "/api/collections/*/restore": {
        "POST": "collections.restore",
    },
    "/api/collections/*/permanent": {
        "DELETE": "collections.delete",
    },

    # Orders API
    "/api/orders": {
        "GET": "orders.view",
        "POST": "orders.create",
    },
    "/api/orders/bulk-delete": {
        "POST": "orders.delete",
        "DELETE": "orders.delete",
    },
    "/api/orders/bulk-ship": {
        "POST": "orders.manage_shipments",
    },
    "/api/orders/*": {
        "GET": "orders.view",
        "PUT": "orders.edit",
        "PATCH": "orders.edit",
        "DELETE": "orders.delete",
    },
    "/api/orders/*/status": {
        "PUT": "orders.change_status",
        "PATCH": "orders.change_status",
        "POST": "orders.change_status",
    },
    "/api/orders/*/restore": {
        "POST": "orders.restore",
    },
    "/api/orders/*/shipments": {
        "GET": "orders.view",
        "POST": "orders.manage_shipments",
    },
    "/api/orders/*/shipments/*": {
        "GET": "orders.view",
        "PUT": "orders.manage_shipments",
        "DELETE": "orders.manage_shipments",
    },
    "/api/orders/*/shipments/*/status": {
        "PUT": "orders.manage_shipments",
        "PATCH": "orders.manage_shipments",
    },
    "/api/orders/*/shipments/*/refresh": {
        "POST": "orders.manage_shipments",
    },
    "/api/orders/*/fulfill": {
        "GET": "orders.view",
        "POST": "orders.manage_shipments",
    },
    "/api/orders/*/items": {
        "GET": "orders.view",
    },
    "/api/orders/*/payments": {
        "GET": "orders.view",
    },
    "/api/orders/*/cod": {
        "GET": "orders.view",
        "POST": "orders.edit",
    },

    # Shipments API
    "/api/shipments/*": {
        "GET": "orders.view",
        "PUT": "orders.manage_shipments",
        "DELETE": "orders.manage_shipments",
    },
    "/api/shipments/*/check-status": {
        "GET": "orders.view",
        "POST": "orders.manage_shipments",
    },

    # Customers API
    "/api/customers": {
        "GET": "customers.view",
        "POST": "customers.create",
    },
    "/api/customers/bulk-delete": {
        "POST": "customers.delete",
        "DELETE": "customers.delete",
    },
    "/api/customers/sync": {
        "POST": "customers.sync",
    },
    "/api/customers/*": {
        "GET": "customers.view",
        "PUT": "customers.edit",
        "PATCH": "customers.edit",
        "DELETE": "customers.delete",
    },
    "/api/customers/*/restore": {
        "POST": "customers.edit",
    },
    "/api/customers/*/permanent": {
        "DELETE": "customers.delete",
    },

    # Discounts API
    "/api/discounts": {
        "GET": "discounts.view",
        "POST": "discounts.create",
    },
    "/api/discounts/*": {
        "GET": "discounts.view",
        "PUT": "discounts.edit",
        "PATCH": "discounts.edit",
        "DELETE": "discounts.delete",
    },
    "/api/discounts/*/toggle": {
        "POST": "discounts.toggle_status",
    },

    # Pages API
    "/api/pages": {
        "GET": "pages.view",
        "POST": "pages.create",
    },
    "/api/pages/bulk-delete": {
        "POST": "pages.delete",
        "DELETE": "pages.delete",
    },
    "/api/pages/bulk-restore": {
        "POST": "pages.edit",
    },
    "/api/pages/bulk-publish": {
        "POST": "pages.publish",
    },
    "/api/pages/bulk-unpublish": {
        "POST": "pages.publish",
    },
    "/api/pages/*": {
        "GET": "pages.view",
        "PUT": "pages.edit",
        "PATCH": "pages.edit",
        "DELETE": "pages.delete",
    },
    "/api/pages/*/restore": {
        "POST": "pages.edit",
    },
    "/api/pages/*/permanent": {
        "DELETE": "pages.delete",
    },

    # Widgets API
    "/api/widgets": {
        "GET": "widgets.view",
        "POST": "widgets.create",
    },
    "/api/widgets/bulk-delete": {
        "POST": "widgets.delete",
        "DELETE": "widgets.delete",
    },
    "/api/widgets/bulk-restore": {
        "POST": "widgets.edit",
    },
    "/api/widgets/bulk-activate": {
        "POST": "widgets.toggle_status",
    },
    "/api/widgets/bulk-deactivate": {
        "POST": "widgets.toggle_status",
    },
    "/api/widgets/*": {
        "GET": "widgets.view",
        "PUT": "widgets.edit",
        "PATCH": "widgets.edit",
        "DELETE": "widgets.delete",
    },
    "/api/widgets/*/restore": {
        "POST": "widgets.edit",
    },
    "/api/widgets/*/permanent": {
        "DELETE": "widgets.delete",
    },
    "/api/widgets/*/toggle-status": {
        "POST": "widgets.toggle_status",
        "PUT": "widgets.toggle_status",
    },
    "/api/widgets/*/history": {
        "GET": "widgets.view",
    },
    "/api/widgets/*/history/*": {
        "GET": "widgets.view",
        "DELETE": "widgets.edit",
    },
    "/api/widgets/*/history/restore": {
        "POST": "widgets.edit",
    },

    # Media API
    "/api/media": {
        "GET": "media.view",
        "POST": "media.upload",
    },
    "/api/media/*": {
        "GET": "media.view",
        "DELETE": "media.delete",
    },
    "/api/media/folders": {
        "GET": "media.view",
        "POST": "media.manage_folders",
    },
    "/api/media/folders/*": {
        "PUT": "media.manage_folders",
        "DELETE": "media.manage_folders",
    },

    # Attributes API
    "/api/admin/attributes": {
        "GET": "attributes.view",
        "POST": "attributes.create",
    },
    "/api/admin/attributes/bulk-delete": {
        "POST": "attributes.delete",
        "DELETE": "attributes.delete",
    },
    "/api/admin/attributes/bulk-restore": {
        "POST": "attributes.edit",
    },
    "/api/admin/attributes/values/search": {
        "GET": "attributes.view",
        "POST": "attributes.view",
    },
    "/api/admin/attributes/*": {
        "GET": "attributes.view",
        "PUT": "attributes.edit",
        "PATCH": "attributes.edit",
        "DELETE": "attributes.delete",
    },
    "/api/admin/attributes/*/restore": {
        "POST": "attributes.edit",
    },
    "/api/admin/attributes/*/permanent": {
        "DELETE": "attributes.delete",
    },
    "/api/admin/attributes/*/usage": {
        "GET": "attributes.view",
    },
    "/api/admin/attributes/*/values": {
        "GET": "attributes.view",
        "POST": "attributes.edit",
        "PUT": "attributes.edit",
        "DELETE": "attributes.edit",
    },

    # Analytics API
    "/api/analytics": {
        "GET": "analytics.view",
        "POST": "analytics.create",
    },
    "/api/analytics/*": {
        "GET": "analytics.view",
        "PUT": "analytics.edit",
        "PATCH": "analytics.edit",
        "DELETE": "analytics.edit",
    },
    "/api/analytics/*/toggle": {
        "POST": "analytics.toggle",
    },

    # Settings API
    "/api/settings/stripe": {
        "GET": "settings.general.view",
        "POST": "settings.general.edit",
    },
    "/api/settings/sslcommerz": {
        "GET": "settings.general.view",
        "POST": "settings.general.edit",
    },
    "/api/settings/header": {
        "GET": "settings.general.view",
        "PUT": "settings.header.edit",
        "POST": "settings.header.edit",
    },
    "/api/settings/footer": {
        "GET": "settings.general.view",
        "PUT": "settings.footer.edit",
        "POST": "settings.footer.edit",
    },
    "/api/settings/seo": {
        "GET": "settings.general.view",
        "PUT": "settings.seo.edit",
        "POST": "settings.seo.edit",
    },
    "/api/settings/firebase": {
        "GET": "settings.notifications.edit",
        "PUT": "settings.notifications.edit",
        "POST": "settings.notifications.edit",
    },
    "/api/settings/openrouter": {
        "GET": "settings.general.view",
        "PUT": "settings.general.edit",
        "POST": "settings.general.edit",
    },
    "/api/settings/storefront-url": {
        "GET": "settings.general.view",
        "PUT": "settings.general.edit",
        "POST": "settings.general.edit",
    },
    "/api/settings/hero-sliders": {
        "GET": "settings.general.view",
        "POST": "settings.header.edit",
    },
    "/api/settings/hero-sliders/*": {
        "GET": "settings.general.view",
        "PUT": "settings.header.edit",
        "DELETE": "settings.header.edit",
    },
    "/api/settings/delivery-locations": {
        "GET": "settings.delivery_locations.view",
        "POST": "settings.delivery_locations.edit",
    },
    "/api/settings/delivery-locations/all": {
        "GET": "settings.delivery_locations.view",
    },
    "/api/settings/delivery-locations/import-pathao": {
        "POST": "settings.delivery_locations.edit",
    },
    "/api/settings/delivery-locations/*": {
        "GET": "settings.delivery_locations.view",
        "PUT": "settings.delivery_locations.edit",
        "DELETE": "settings.delivery_locations.edit",
    },
    "/api/settings/delivery-providers": {
        "GET": "settings.delivery_providers.view",
        "POST": "settings.delivery_providers.edit",
    },
    "/api/settings/delivery-providers/create-test": {
        "POST": "settings.delivery_providers.edit",
    },
    "/api/settings/delivery-providers/*": {
        "GET": "settings.delivery_providers.view",
        "PUT": "settings.delivery_providers.edit",
        "DELETE": "settings.delivery_providers.edit",
    },
    "/api/settings/fraud-checker": {
        "GET": "settings.fraud_checker.view",
        "POST": "settings.fraud_checker.edit",
    },
    "/api/settings/fraud-checker/*": {
        "GET": "settings.fraud_checker.view",
        "PUT": "settings.fraud_checker.edit",
        "DELETE": "settings.fraud_checker.edit",
    },
    "/api/settings/fraud-checker/*/test": {
        "POST": "settings.fraud_checker.view",
    },
    "/api/settings/cache/stats": {
        "GET": "settings.cache.view",
    },
    "/api/settings/cache/clear": {
        "POST": "settings.cache.manage",
        "DELETE": "settings.cache.manage",
    },
    "/api/settings/cache/clear-*": {
        "POST": "settings.cache.manage",
        "DELETE": "settings.cache.manage",
    },

    # Admin Settings
    "/api/admin/settings/shipping-methods": {
        "GET": "settings.shipping_methods.view",
        "POST": "settings.shipping_methods.edit",
    },
    "/api/admin/settings/shipping-methods/*": {
        "GET": "settings.shipping_methods.view",
        "PUT": "settings.shipping_methods.edit",
        "DELETE": "settings.shipping_methods.edit",
    },
    "/api/admin/settings/shipping-methods/*/restore": {
        "POST": "settings.shipping_methods.edit",
    },
    "/api/admin/settings/shipping-methods/*/permanent-delete": {
        "DELETE": "settings.shipping_methods.edit",
    },
    "/api/admin/settings/checkout-languages": {
        "GET": "settings.general.view",
        "POST": "settings.general.edit",
    },
    "/api/admin/settings/checkout-languages/*": {
        "GET": "settings.general.view",
        "PUT": "settings.general.edit",
        "DELETE": "settings.general.edit",
    },
    "/api/admin/settings/checkout-languages/*/restore": {
        "POST": "settings.general.edit",
    },
    "/api/admin/settings/meta-conversions": {
        "GET": "analytics.view",
        "POST": "analytics.edit",
        "PUT": "analytics.edit",
    },
    "/api/admin/settings/meta-conversions/logs": {
        "GET": "analytics.view",
    },

    # Navigation API
    "/api/navigation": {
        "GET": "settings.header.edit",
        "POST": "settings.header.edit",
        "PUT": "settings.header.edit",
    },
    "/api/navigation/*": {
        "GET": "settings.header.edit",
        "PUT": "settings.header.edit",
        "DELETE": "settings.header.edit",
    },
    "/api/admin/navigation/preview-products": {
        "GET": "products.view",
        "POST": "products.view",
    },

    # Admin Abandoned Checkouts
    "/api/admin/abandoned-checkouts": {
        "GET": "orders.view",
    },

    # Search API
    "/api/search": {
        "GET": "products.view",
        "POST": "products.view",
    },
    "/api/search/reindex": {
        "POST": "products.bulk_operations",
    },

    # System Prompt API
    "/api/system-prompt": {
        "GET": "settings.general.view",
        "PUT": "settings.general.edit",
        "POST": "settings.general.edit",
    },

    # Dashboard API
    "/api/dashboard": {
        "GET": "dashboard.view",
    },
    "/api/dashboard/*": {
        "GET": "dashboard.view",
    },

    # Team/Admin User Management API
    "/api/auth/admin-users": {
        "GET": "team.view",
        "POST": "team.manage",
        "DELETE": "team.manage",
    },

    # RBAC API
    "/api/admin/rbac/roles": {
        "GET": any_of("team.view", "team.manage_roles"),
        "POST": "team.manage_roles",
    },
    "/api/admin/rbac/roles/*": {
        "GET": any_of("team.view", "team.manage_roles"),
        "PUT": "team.manage_roles",
        "DELETE": "team.manage_roles",
    },
    "/api/admin/rbac/permissions": {
        "GET": any_of("team.view", "team.manage_roles"),
    },
    "/api/admin/rbac/my-permissions": {
        "GET": "dashboard.view",  # Any authenticated user can view their own permissions
    },
    "/api/admin/rbac/user-roles": {
        "POST": "team.manage_roles",
        "DELETE": "team.manage_roles",
    },
    "/api/admin/rbac/user-permissions": {
        "POST": "team.manage_roles",
        "DELETE": "team.manage_roles",
    },

    # Inventory API
    "/api/inventory/alerts": {
        "GET": "products.view",
        "PATCH": "products.edit",
    },
    "/api/inventory/*/adjust": {
        "POST": "products.edit",
    },

    # FCM Token API
    "/api/admin/fcm-token": {
        "POST": "dashboard.view",  # Any admin can register their token
    },
    "/api/admin/fcm-token-cleanup": {
        "POST": "settings.notifications.edit",
    },
}

# Admin pages are only ever fetched with GET. Pages not listed here
# (e.g. /admin/settings/account) are open to any authenticated admin.
PAGE_PERMISSIONS = {
    # Dashboard
    "/admin": "dashboard.view",

    # Inventory
    "/admin/inventory": "products.view",

    # Products
    "/admin/products": "products.view",
    "/admin/products/new": "products.create",
    "/admin/products/*": "products.view",
    "/admin/products/*/edit": "products.edit",

    # Categories
    "/admin/categories": "categories.view",
    "/admin/categories/new": "categories.create",
    "/admin/categories/*/edit": "categories.edit",

    # Attributes
    "/admin/attributes": "attributes.view",

    # Collections
    "/admin/collections": "collections.view",
    "/admin/collections/new": "collections.create",
    "/admin/collections/trash": "collections.view",
    "/admin/collections/*/edit": "collections.edit",

    # Media
    "/admin/media": "media.view",

    # Pages
    "/admin/pages": "pages.view",
    "/admin/pages/new": "pages.create",
    "/admin/pages/trash": "pages.view",
    "/admin/pages/*/edit": "pages.edit",

    # Widgets
    "/admin/widgets": "widgets.view",
    "/admin/widgets/create": "widgets.create",
    "/admin/widgets/trash": "widgets.view",
    "/admin/widgets/*": "widgets.edit",

    # Orders
    "/admin/orders": "orders.view",
    "/admin/orders/new": "orders.create",
    "/admin/orders/*": "orders.view",
    "/admin/orders/*/edit": "orders.edit",
    "/admin/abandoned-checkouts": "orders.view",

    # Discounts
    "/admin/discounts": "discounts.view",
    "/admin/discounts/new": "discounts.create",
    "/admin/discounts/*/edit": "discounts.edit",

    # Analytics
    "/admin/analytics": "analytics.view",
    "/admin/analytics/new": "analytics.create",
    "/admin/analytics/*/edit": "analytics.edit",

    # Customers
    "/admin/customers": "customers.view",
    "/admin/customers/new": "customers.create",
    "/admin/customers/*/edit": "customers.edit",
    "/admin/customers/*/history": "customers.view_history",

    # Settings
    "/admin/settings": "settings.general.view",
    "/admin/settings/notifications": "settings.notifications.edit",
    "/admin/settings/hero-sliders": "settings.header.edit",
    "/admin/settings/delivery-locations": "settings.delivery_locations.view",
    "/admin/settings/delivery-providers": "settings.delivery_providers.view",
    "/admin/settings/fraud-checker": "settings.fraud_checker.view",
    "/admin/settings/shipping-methods": "settings.shipping_methods.view",
    "/admin/settings/checkout-languages": "settings.general.view",
    "/admin/settings/meta-conversion": "settings.general.view",
    "/admin/settings/payment-gateways": "settings.general.view",
    "/admin/settings/cache": "settings.cache.view",
}


# Compiled once at import time
API_ROUTE_TABLE = RouteTable(ROUTE_PERMISSIONS)
PAGE_ROUTE_TABLE = RouteTable({path: {"GET": rule} for path, rule in PAGE_PERMISSIONS.items()})


def get_route_permission(pathname: str, method: str) -> Optional[PermissionRequirement]:
    return API_ROUTE_TABLE.lookup(pathname, method)


def get_page_permission(pathname: str) -> Optional[PermissionRequirement]:
    return PAGE_ROUTE_TABLE.lookup(normalize_path(pathname), "GET")


def has_page_access(permissions: AbstractSet[str], is_super_admin: bool, pathname: str) -> bool:
    """Super admins always have access; unlisted pages only need an authenticated admin"""
    if is_super_admin:
        return True
    requirement = get_page_permission(pathname)
    if requirement is None:
        return True
    return requirement.is_satisfied_by(permissions)
