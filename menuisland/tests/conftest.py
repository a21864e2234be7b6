"""
Test fixtures - in-memory SQLite database, seeded tenant + header-authenticated HTTP clients
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from menuisland.database import Base, get_db
from menuisland.main import app
from menuisland.models import Restaurant, Template, Category, MenuItem, Allergen, menu_item_allergens
from menuisland.services.provisioning import SubdomainProvisioner, get_provisioner
from menuisland.services.translation import TranslationCache, Translator, get_translator


class FakeTranslationProvider:
    """Prefixes text with the target language and records every call"""

    def __init__(self):
        self.calls = []

    async def translate(self, text, target_lang, source_lang):
        self.calls.append((text, target_lang, source_lang))
        return f"[{target_lang}] {text}"


@pytest_asyncio.fixture()
async def db_session():
    """Create a fresh in-memory SQLite database for each test"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture()
async def seed_data(db_session):
    """Insert baseline test data: template, 2 allergens, "demo" tenant with a menu, a second tenant"""
    template = Template(id=1, name="Classico", color_scheme={"primary": "#1f2937"}, is_popular=True)
    gluten = Allergen(name="Glutine", icon="<svg></svg>", description="Cereali contenenti glutine")
    lactose = Allergen(name="Lattosio")
    demo = Restaurant(
        name="Trattoria Demo",
        subdomain="demo",
        location="Roma",
        owner_id="owner-1",
        template_id=1,
        category="italian",
    )
    other = Restaurant(name="Osteria Altra", subdomain="altra", owner_id="owner-2")

    db_session.add_all([template, gluten, lactose, demo, other])
    await db_session.flush()

    # Inserted before "Antipasti" but rendered after it (sort_order 1 > 0)
    primi = Category(restaurant_id=demo.id, name="Primi", sort_order=1)
    antipasti = Category(restaurant_id=demo.id, name="Antipasti", description="Per iniziare", sort_order=0)
    db_session.add_all([primi, antipasti])
    await db_session.flush()

    bruschetta = MenuItem(
        category_id=antipasti.id,
        name="Bruschetta",
        description="Pane tostato e pomodoro",
        price_cents=650,
        currency="EUR",
    )
    db_session.add(bruschetta)
    await db_session.flush()

    await db_session.execute(
        insert(menu_item_allergens).values(menu_item_id=bruschetta.id, allergen_id=gluten.id)
    )
    await db_session.commit()

    return {
        "template": template,
        "gluten": gluten,
        "lactose": lactose,
        "demo": demo,
        "other": other,
        "antipasti": antipasti,
        "primi": primi,
        "bruschetta": bruschetta,
    }


@pytest.fixture()
def fake_provider():
    return FakeTranslationProvider()


@pytest.fixture()
def translator(fake_provider):
    return Translator(provider=fake_provider, cache=TranslationCache(max_entries=100), source_lang="it")


def _override_dependencies(db_session, translator):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_translator] = lambda: translator
    app.dependency_overrides[get_provisioner] = lambda: SubdomainProvisioner(api_token="", zone_id="")


def _client(headers=None):
    transport = ASGITransport(app=app)
    client = AsyncClient(transport=transport, base_url="http://test", follow_redirects=True)
    client.headers.update(headers or {})
    return client


@pytest_asyncio.fixture()
async def client(db_session, seed_data, translator):
    """Client authenticated as owner-1, the owner of the "demo" restaurant"""
    _override_dependencies(db_session, translator)

    async with _client({"X-User-Id": "owner-1"}) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def admin_client(db_session, seed_data, translator):
    """Client authenticated as a platform admin"""
    _override_dependencies(db_session, translator)

    async with _client({"X-User-Id": "admin", "X-User-Admin": "true"}) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauth_client(db_session, seed_data, translator):
    """Unauthenticated httpx AsyncClient (what a diner's browser looks like)"""
    _override_dependencies(db_session, translator)

    async with _client() as ac:
        yield ac

    app.dependency_overrides.clear()
