"""
Basic usage - Login with an OTP and list products
"""
import asyncio
from otpcatalog import CatalogClient


async def main():
    async with CatalogClient() as client:

        # Step 1: the backend emails a one-time password
        outcome = await client.login("user@example.com")
        if not outcome:
            print(f"Login failed: {outcome.message}")
            return

        # Step 2: validating the OTP also loads the catalog
        outcome = await client.verify_otp(input("OTP: "))
        if not outcome:
            print(f"OTP rejected: {outcome.message}")
            return

        print(f"\n{len(client.products)} products:")
        for product in client.products:
            print(f"  {product.product_id}  {product.product_name}  ({product.company_name})")


if __name__ == "__main__":
    asyncio.run(main())
