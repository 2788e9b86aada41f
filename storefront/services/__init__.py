# Services package init
"""
Storefront Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take an AsyncSession plus validated schema objects, apply the
       business rules, and return ORM objects. Routes reach them through
       FastAPI dependencies.

Service Inventory:
    - security:        PasswordHasher (bcrypt) and TokenSigner (JWT)
    - AuthService:     register, login, session resolution, admin seeding
    - BlogService:     admin CRUD over blog posts
    - ProductService:  admin CRUD plus the public catalogue query
    - OrderService:    line resolution, pricing, persistence, notification
    - EmailService:    order confirmation and admin alert over SMTP
    - ImageService:    resize and thumbnail renditions (Pillow)
    - UploadService:   size checks, storage and cleanup of uploaded images
    - crud:            shared get-or-404 / flush-or-raise helpers
"""
