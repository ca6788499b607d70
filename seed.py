"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 1 admin, 4 customers, 4 drivers, 3 partners (password: ``password123``)
  - a small menu for every partner
  - 1 pending order (with its delivery in the open pool)
  - 2 pending ride requests
"""

import asyncio

from sqlalchemy import func, select

from src.domain.enums import DeliveryStatus, OrderStatus, RideStatus
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.models import CustomerModel
from src.infrastructure.repositories import Store
from src.infrastructure.security import hash_password

DEFAULT_PASSWORD = "password123"

ADMINS = [{"name": "Ops Admin", "email": "admin@example.com"}]

CUSTOMERS = [
    {"name": "Aarav Sharma", "email": "aarav@example.com", "address": "12 Hill Road, Bandra"},
    {"name": "Priya Patel", "email": "priya@example.com", "address": "4 Lake View, Powai"},
    {"name": "Rohan Mehta", "email": "rohan@example.com", "address": "88 Link Road, Andheri"},
    {"name": "Sneha Gupta", "email": "sneha@example.com", "address": "7 Marine Drive, Churchgate"},
]

DRIVERS = [
    {"name": "Vikram Singh", "email": "vikram@example.com", "vehicle": "Bike MH-02-1234", "rating": 4.6},
    {"name": "Karan Joshi", "email": "karan@example.com", "vehicle": "Sedan MH-01-5678", "rating": 4.3},
    {"name": "Meera Nair", "email": "meera@example.com", "vehicle": "Auto MH-03-9012", "rating": 4.8},
    {"name": "Arjun Kumar", "email": "arjun@example.com", "vehicle": "SUV MH-04-3456", "rating": 4.4},
]

PARTNERS = [
    {
        "name": "Spice Route Kitchen",
        "email": "spiceroute@example.com",
        "address": "22 Carter Road, Bandra",
        "category": "Indian",
        "menu": [
            ("Paneer Tikka", 220.0, "Starters"),
            ("Butter Chicken", 340.0, "Mains"),
            ("Garlic Naan", 60.0, "Breads"),
        ],
    },
    {
        "name": "Green Bowl",
        "email": "greenbowl@example.com",
        "address": "3 Hiranandani Gardens, Powai",
        "category": "Salads",
        "menu": [
            ("Quinoa Bowl", 280.0, "Bowls"),
            ("Cold-pressed Juice", 150.0, "Drinks"),
        ],
    },
    {
        "name": "Bombay Bakehouse",
        "email": "bakehouse@example.com",
        "address": "15 Colaba Causeway, Colaba",
        "category": "Bakery",
        "menu": [
            ("Croissant", 90.0, "Pastries"),
            ("Sourdough Loaf", 240.0, "Breads"),
        ],
    },
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(select(func.count()).select_from(CustomerModel))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        store = Store(session)
        password_hash = hash_password(DEFAULT_PASSWORD)

        # ── Accounts ──────────────────────────────────────────────────
        for a in ADMINS:
            await store.admins.insert(password_hash=password_hash, **a)
        customers = [
            await store.customers.insert(password_hash=password_hash, **c)
            for c in CUSTOMERS
        ]
        for d in DRIVERS:
            await store.drivers.insert(password_hash=password_hash, **d)
        print(
            f"  Created {len(ADMINS)} admin, {len(CUSTOMERS)} customers, "
            f"{len(DRIVERS)} drivers"
        )

        # ── Partners + menus ──────────────────────────────────────────
        partners = []
        menu_count = 0
        for p in PARTNERS:
            fields = {k: v for k, v in p.items() if k != "menu"}
            partner = await store.partners.insert(password_hash=password_hash, **fields)
            partners.append(partner)
            for name, price, category in p["menu"]:
                await store.menu_items.insert(
                    partner_id=partner.id, name=name, price=price, category=category
                )
                menu_count += 1
        print(f"  Created {len(partners)} partners with {menu_count} menu items")

        # ── A pending order with its delivery in the open pool ────────
        partner = partners[0]
        menu = await store.menu_items.for_partner(partner.id)
        items = [
            {"menuId": menu[0].id, "name": menu[0].name, "price": menu[0].price, "quantity": 2},
            {"menuId": menu[2].id, "name": menu[2].name, "price": menu[2].price, "quantity": 4},
        ]
        order = await store.orders.insert(
            customer_id=customers[0].id,
            partner_id=partner.id,
            items=items,
            total=sum(i["price"] * i["quantity"] for i in items),
            status=OrderStatus.PENDING,
            delivery_address=customers[0].address,
            payment_method="cash",
        )
        await store.deliveries.insert(
            order_id=order.id,
            status=DeliveryStatus.READY,
            pickup_address=partner.address,
            drop_address=order.delivery_address,
        )
        print("  Created 1 order with its delivery")

        # ── Ride requests ─────────────────────────────────────────────
        rides = [
            (customers[1], "4 Lake View, Powai", (19.1176, 72.9060), "Terminal 2, Mumbai Airport", (19.0896, 72.8656), "sedan"),
            (customers[2], "88 Link Road, Andheri", (19.1136, 72.8697), "Bandra Station", (19.0544, 72.8402), "auto"),
        ]
        for customer, pickup, (plat, plng), drop, (dlat, dlng), vehicle in rides:
            await store.rides.insert(
                customer_id=customer.id,
                pickup_location={"address": pickup, "lat": plat, "lng": plng},
                drop_location={"address": drop, "lat": dlat, "lng": dlng},
                vehicle_type=vehicle,
                status=RideStatus.PENDING,
            )
        print(f"  Created {len(rides)} ride requests")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
