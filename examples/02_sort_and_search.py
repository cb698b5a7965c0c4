"""
Sorting, searching and observing the product list
"""
import asyncio
from otpcatalog import CatalogClient, APIConfig


async def main():
    config = APIConfig(base_url="http://localhost:8001")

    async with CatalogClient(config=config) as client:
        # Print every projection change
        client.catalog.on(
            "changed",
            lambda snap: print(f"[view] {len(snap.view_products)}/{len(snap.source_products)} products")
        )

        await client.login("user@example.com")
        await client.verify_otp(input("OTP: "))

        # Each call starts again from the full list
        client.sort_by("category")
        for product in client.products:
            print(f"  {product.product_category:<15} {product.product_name}")

        client.search("pro")
        for product in client.products:
            print(f"  {product.product_name}")

        # Back to the fetched order
        client.search("")

        client.logout()


if __name__ == "__main__":
    asyncio.run(main())
