"""ShopShift: multi-tenant shop staff scheduling API."""
