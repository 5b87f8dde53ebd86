from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from app.dependencies import get_auth_service, get_current_user
from app.exceptions import PermissionDeniedError
from app.main import app
from app.models.article import ArticleStatus
from app.schemas.article import ArticleCreateSchema, ArticleUpdateSchema
from app.services.article_service import ArticleService
from app.services.firebase_service import ARTICLES_COLLECTION, TAGS_COLLECTION

EARLIER = datetime(2024, 5, 1, tzinfo=timezone.utc)
LATER = datetime(2024, 6, 1, tzinfo=timezone.utc)


def make_payload(**overrides):
    data = {
        "title": "Refleksi Akhir Tahun",
        "thumbnail": "https://example.com/cover.jpg",
        "content": "## Pembuka\n\nIsi artikel.",
        "excerpt": "Catatan singkat.",
    }
    data.update(overrides)
    return ArticleCreateSchema(**data)


# --- Service ---

@pytest.mark.asyncio
async def test_create_defaults_author_to_display_name(article_svc, fake_firebase, staff):
    article_id = await article_svc.create_article(staff, make_payload(author="Someone Else"))

    stored = fake_firebase.docs(ARTICLES_COLLECTION)[article_id]
    assert stored["author"] == "Budi"
    assert stored["slug"] == "refleksi-akhir-tahun"
    assert stored["status"] == "Draft"
    assert stored["category"] == "Opini"
    assert stored["createdAt"] is not None


@pytest.mark.asyncio
async def test_admin_may_set_author(article_svc, fake_firebase, admin):
    article_id = await article_svc.create_article(admin, make_payload(author="  Tamu Redaksi "))
    assert fake_firebase.docs(ARTICLES_COLLECTION)[article_id]["author"] == "Tamu Redaksi"


@pytest.mark.asyncio
async def test_tags_are_normalized_and_synced(article_svc, fake_firebase, staff):
    article_id = await article_svc.create_article(staff, make_payload(tags=["A", "a", " A "]))

    assert fake_firebase.docs(ARTICLES_COLLECTION)[article_id]["tags"] == ["a"]
    assert list(fake_firebase.docs(TAGS_COLLECTION)) == ["a"]


@pytest.mark.asyncio
async def test_tag_failure_does_not_fail_save(article_svc, fake_firebase, staff):
    fake_firebase.fail["set_document"] = RuntimeError("permission-denied")

    article_id = await article_svc.create_article(staff, make_payload(tags=["hukum"]))

    assert article_id in fake_firebase.docs(ARTICLES_COLLECTION)


@pytest.mark.asyncio
async def test_deploy_hook_fires_only_when_published(article_svc, hook, staff):
    article_id = await article_svc.create_article(staff, make_payload())
    hook.schedule.assert_not_called()

    updated = await article_svc.update_article(
        staff, article_id, ArticleUpdateSchema(status=ArticleStatus.PUBLISHED)
    )

    assert updated.status == ArticleStatus.PUBLISHED
    hook.schedule.assert_called_once()


@pytest.mark.asyncio
async def test_editing_published_article_fires_hook_again(article_svc, hook, staff):
    article_id = await article_svc.create_article(staff, make_payload(status=ArticleStatus.PUBLISHED))
    await article_svc.update_article(staff, article_id, ArticleUpdateSchema(excerpt="Baru"))
    assert hook.schedule.call_count == 2


@pytest.mark.asyncio
async def test_update_rederives_slug(article_svc, staff):
    article_id = await article_svc.create_article(staff, make_payload())

    updated = await article_svc.update_article(
        staff, article_id, ArticleUpdateSchema(title="Judul Baru!")
    )

    assert updated.slug == "judul-baru"
    assert updated.content == "## Pembuka\n\nIsi artikel."


@pytest.mark.asyncio
async def test_staff_cannot_reassign_author(article_svc, staff):
    article_id = await article_svc.create_article(staff, make_payload())
    updated = await article_svc.update_article(
        staff, article_id, ArticleUpdateSchema(author="Orang Lain")
    )
    assert updated.author == "Budi"


@pytest.mark.asyncio
async def test_non_owner_cannot_edit_or_delete(article_svc, fake_firebase, admin, staff):
    article_id = await article_svc.create_article(admin, make_payload())

    with pytest.raises(PermissionDeniedError):
        await article_svc.update_article(staff, article_id, ArticleUpdateSchema(title="X"))
    with pytest.raises(PermissionDeniedError):
        await article_svc.delete_article(staff, article_id)

    assert fake_firebase.docs(ARTICLES_COLLECTION)[article_id]["title"] == "Refleksi Akhir Tahun"


@pytest.mark.asyncio
async def test_admin_can_edit_any_article(article_svc, admin, staff):
    article_id = await article_svc.create_article(staff, make_payload())
    updated = await article_svc.update_article(admin, article_id, ArticleUpdateSchema(title="Disunting"))
    assert updated.title == "Disunting"


@pytest.mark.asyncio
async def test_update_missing_returns_none(article_svc, staff):
    assert await article_svc.update_article(staff, "nope", ArticleUpdateSchema(title="X")) is None


@pytest.mark.asyncio
async def test_delete_missing_is_noop(article_svc, fake_firebase, staff):
    await article_svc.delete_article(staff, "nope")
    assert ("delete_document", ARTICLES_COLLECTION, "nope") in fake_firebase.calls


@pytest.mark.asyncio
async def test_list_newest_first_and_skips_malformed(article_svc, fake_firebase, staff):
    first = await article_svc.create_article(staff, make_payload(title="Pertama"))
    second = await article_svc.create_article(staff, make_payload(title="Kedua"))
    fake_firebase.seed(ARTICLES_COLLECTION, "broken", {"createdAt": LATER})

    articles = await article_svc.list_articles()

    assert [a.article_id for a in articles] == [second, first]


# --- Routes ---

@pytest.fixture
def route_service(fake_firebase, tag_svc, monkeypatch):
    service = ArticleService(firebase=fake_firebase, tags=tag_svc, hook=MagicMock())
    monkeypatch.setattr("app.api.routes.articles.article_service", service)
    return service


def test_create_and_fetch_article(client, route_service, staff):
    app.dependency_overrides[get_current_user] = lambda: staff

    response = client.post("/api/v1/articles", json={
        "title": "Hello, World!",
        "thumbnail": "https://example.com/a.jpg",
        "content": "Isi",
        "excerpt": "Ringkas",
        "tags": ["Hukum"],
    })

    assert response.status_code == 201
    body = response.json()
    assert body["slug"] == "hello-world"

    fetched = client.get(f"/api/v1/articles/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["author"] == "Budi"
    assert fetched.json()["tags"] == ["hukum"]


def test_create_rejects_blank_content(client, route_service, staff):
    app.dependency_overrides[get_current_user] = lambda: staff

    response = client.post("/api/v1/articles", json={
        "title": "Judul",
        "thumbnail": "https://example.com/a.jpg",
        "content": "   ",
        "excerpt": "Ringkas",
    })

    assert response.status_code == 400


def test_create_requires_thumbnail(client, route_service, staff):
    app.dependency_overrides[get_current_user] = lambda: staff
    response = client.post("/api/v1/articles", json={"title": "Judul", "content": "Isi", "excerpt": "R"})
    assert response.status_code == 422


def test_staff_list_defaults_to_own_name(client, route_service, fake_firebase, staff):
    fake_firebase.seed(ARTICLES_COLLECTION, "a1", {"title": "Milik Budi", "author": "Budi", "createdAt": LATER})
    fake_firebase.seed(ARTICLES_COLLECTION, "a2", {"title": "Milik Sari", "author": "Sari", "createdAt": EARLIER})
    app.dependency_overrides[get_current_user] = lambda: staff

    default = client.get("/api/v1/articles").json()
    everything = client.get("/api/v1/articles?q=").json()

    assert default["search"] == "Budi"
    assert [a["id"] for a in default["articles"]] == ["a1"]
    assert everything["total"] == 2


def test_non_owner_update_is_forbidden(client, route_service, fake_firebase, staff):
    fake_firebase.seed(ARTICLES_COLLECTION, "a2", {"title": "Milik Sari", "author": "Sari", "createdAt": EARLIER})
    app.dependency_overrides[get_current_user] = lambda: staff

    response = client.put("/api/v1/articles/a2", json={"title": "Diubah"})

    assert response.status_code == 403
    assert fake_firebase.docs(ARTICLES_COLLECTION)["a2"]["title"] == "Milik Sari"


def test_get_missing_article(client, route_service, staff):
    app.dependency_overrides[get_current_user] = lambda: staff
    assert client.get("/api/v1/articles/missing").status_code == 404


def test_delete_article(client, route_service, fake_firebase, admin):
    fake_firebase.seed(ARTICLES_COLLECTION, "a2", {"title": "Milik Sari", "author": "Sari", "createdAt": EARLIER})
    app.dependency_overrides[get_current_user] = lambda: admin

    assert client.delete("/api/v1/articles/a2").status_code == 204
    assert "a2" not in fake_firebase.docs(ARTICLES_COLLECTION)


def test_slug_preview(client, staff):
    app.dependency_overrides[get_current_user] = lambda: staff
    response = client.get("/api/v1/articles/slug", params={"title": "  ---Test---  "})
    assert response.json() == {"title": "  ---Test---  ", "slug": "test"}


def test_articles_require_auth(client, auth_svc):
    app.dependency_overrides[get_auth_service] = lambda: auth_svc
    assert client.get("/api/v1/articles").status_code == 401


@pytest.mark.asyncio
async def test_empty_update_does_not_rebuild(article_svc, fake_firebase, hook, staff):
    article_id = await article_svc.create_article(staff, make_payload(status=ArticleStatus.PUBLISHED))
    hook.schedule.reset_mock()

    updated = await article_svc.update_article(staff, article_id, ArticleUpdateSchema())

    assert updated.status == ArticleStatus.PUBLISHED
    hook.schedule.assert_not_called()
    assert ("update_document", ARTICLES_COLLECTION, article_id) not in fake_firebase.calls
