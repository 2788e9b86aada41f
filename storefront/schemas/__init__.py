"""
Storefront Backend — Request/Response Schemas
===============================================

Pydantic models defining the JSON contract. Wire names are camelCase
(`categoryId`, `shippingAddress`, `averageRating`); Python attributes are
snake_case. Input models accept either spelling.
"""
