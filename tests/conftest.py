"""Test fixtures: in-memory cache DB, sample HTML loading, fake upstreams."""

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gift_resolver.database import init_db

SAMPLES_DIR = Path(__file__).resolve().parent.parent / "samples"


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def nft_html() -> str:
    return (SAMPLES_DIR / "telegram_nft_page.html").read_text(encoding="utf-8")


@pytest.fixture()
def missing_html() -> str:
    return (SAMPLES_DIR / "telegram_nft_missing.html").read_text(encoding="utf-8")


@pytest.fixture()
def page_builder():
    return _build_page


def _build_page(
    *,
    rows: dict[str, str] | None = None,
    og_title: str | None = None,
    description: str | None = None,
) -> str:
    """Minimal collectible page with the given table rows and meta tags."""
    head = []
    if og_title is not None:
        head.append(f'<meta property="og:title" content="{og_title}">')
    if description is not None:
        head.append(f'<meta name="twitter:description" content="{description}">')
    table = "".join(f"<tr><th>{k}</th><td>{v}</td></tr>" for k, v in (rows or {}).items())
    return (
        "<html><head>" + "".join(head) + "</head><body>"
        f'<table class="tgme_gift_table">{table}</table>'
        "</body></html>"
    )
