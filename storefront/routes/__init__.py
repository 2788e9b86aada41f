# Routes package init
"""
Storefront Backend — API Routes Package
=========================================

Route Inventory:
    - auth.py:            POST /api/auth/register, /api/auth/login, /api/auth/logout
                          GET  /api/auth/me
    - admin_blog.py:      GET/POST/PUT/DELETE /api/admin/blog
    - admin_products.py:  GET/POST/PUT/DELETE /api/admin/products
    - admin_orders.py:    GET/PUT /api/admin/orders
    - products.py:        GET  /api/products
    - orders.py:          POST /api/orders
    - upload.py:          POST /api/upload
    - health.py:          GET  /health

Routes stay thin: pull data out of the request, call a service, shape the
response. Status codes for failures come from the exception handlers in
main.py, never from the handlers themselves.
"""
