"""Unit tests for the Article domain entity."""

from datetime import datetime, timedelta, timezone

from app.domain.entities import Article


def test_new_article_has_equal_timestamps_and_uuid_id():
    article = Article(title="T", content="C")
    assert article.created_at == article.updated_at
    assert len(article.id) == 36


def test_ids_are_unique():
    ids = {Article().id for _ in range(500)}
    assert len(ids) == 500


def test_apply_changes_merges_only_present_fields():
    article = Article(title="A", content="B")
    article.apply_changes({"title": "C"})
    assert article.title == "C"
    assert article.content == "B"


def test_apply_changes_ignores_protected_fields():
    article = Article(title="A", content="B", image="/uploads/x.png")
    original_id = article.id
    original_created = article.created_at

    article.apply_changes({
        "id": "hijacked",
        "created_at": "1999-01-01T00:00:00Z",
        "image": "/uploads/other.png",
        "bogus": 1,
    })

    assert article.id == original_id
    assert article.created_at == original_created
    assert article.image == "/uploads/x.png"
    assert not hasattr(article, "bogus")


def test_touch_is_strictly_increasing_even_with_future_timestamp():
    future = datetime.now(timezone.utc) + timedelta(hours=1)
    article = Article(created_at=future)
    article.touch()
    assert article.updated_at > future


def test_replace_image_returns_previous_reference():
    article = Article(image="/uploads/old.png")
    before = article.updated_at
    previous = article.replace_image("/uploads/new.png")
    assert previous == "/uploads/old.png"
    assert article.image == "/uploads/new.png"
    assert article.updated_at > before
