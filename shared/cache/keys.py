def product_key(product_id: int) -> str:
    return f"product:{product_id}"


def category_listing_key(category_id: int) -> str:
    return f"products:category:{category_id}"


def brand_listing_key(brand_id: int) -> str:
    return f"products:brand:{brand_id}"
