"""
Demo tenant seed script - creates the "demo" restaurant with a small Italian menu
"""
import asyncio

from sqlalchemy import insert, select

from menuisland.config import get_settings
from menuisland.database import engine, Base, AsyncSessionLocal
from menuisland.models import Allergen, Category, MenuItem, Restaurant, Template, menu_item_allergens
from menuisland.utils.helpers import parse_price

settings = get_settings()

ALLERGENS = ["Glutine", "Lattosio", "Uova", "Frutta a guscio", "Pesce"]

# (category, [(name, description, legacy price string, allergens)])
DEMO_MENU = [
    ("Antipasti", [
        ("Bruschetta al pomodoro", "Pane casereccio, pomodoro, basilico", "€6,50", ["Glutine"]),
        ("Tagliere di salumi", "Prosciutto, salame e formaggi", "14,00 EUR", ["Lattosio"]),
    ]),
    ("Primi", [
        ("Spaghetti alla carbonara", "Guanciale, uovo, pecorino", "12.90", ["Glutine", "Uova", "Lattosio"]),
        ("Risotto ai frutti di mare", None, "€16", ["Pesce"]),
    ]),
    ("Dolci", [
        ("Tiramisù", "Ricetta della casa", "€ 6,00", ["Glutine", "Uova", "Lattosio"]),
        ("Cantucci e vin santo", None, "7,5", ["Glutine", "Frutta a guscio"]),
    ]),
]


async def seed_demo():
    """Create tables and seed the demo tenant (idempotent)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Restaurant).where(Restaurant.subdomain == "demo"))
        if result.scalar_one_or_none():
            print("Demo restaurant already exists")
            return

        result = await session.execute(select(Template).where(Template.id == settings.DEFAULT_TEMPLATE_ID))
        if not result.scalar_one_or_none():
            session.add(Template(id=settings.DEFAULT_TEMPLATE_ID, name="Classico", is_popular=True))

        allergens = {}
        for name in ALLERGENS:
            result = await session.execute(select(Allergen).where(Allergen.name == name))
            allergen = result.scalar_one_or_none() or Allergen(name=name)
            session.add(allergen)
            allergens[name] = allergen

        restaurant = Restaurant(
            name="Trattoria Demo",
            subdomain="demo",
            location="Roma",
            owner_id="demo-owner",
            template_id=settings.DEFAULT_TEMPLATE_ID,
            category="italian",
            timezone="Europe/Rome",
        )
        session.add(restaurant)
        await session.flush()

        item_count = 0
        for sort_order, (category_name, items) in enumerate(DEMO_MENU):
            category = Category(restaurant_id=restaurant.id, name=category_name, sort_order=sort_order)
            session.add(category)
            await session.flush()

            for item_order, (name, description, price, item_allergens) in enumerate(items):
                item = MenuItem(
                    category_id=category.id,
                    name=name,
                    description=description,
                    price_cents=parse_price(price),
                    currency="EUR",
                    sort_order=item_order,
                )
                session.add(item)
                await session.flush()
                for allergen_name in item_allergens:
                    await session.execute(insert(menu_item_allergens).values(
                        menu_item_id=item.id,
                        allergen_id=allergens[allergen_name].id,
                    ))
                item_count += 1

        await session.commit()
        print(f"Seeded demo restaurant (id={restaurant.id}) with {item_count} menu items")
        print(f"\nPublic menu: http://demo.{settings.BASE_DOMAIN}/  or  /api/view/demo")


if __name__ == "__main__":
    asyncio.run(seed_demo())
