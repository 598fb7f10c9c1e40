import asyncio
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from articles.application.services import (
    archive_article,
    create_article,
    delete_article,
    get_article,
    list_tags,
    permanently_delete_article,
    publish_article,
    related_articles,
    restore_article,
    restore_article_version,
    search_articles,
    update_article,
)
from articles.domain.entities import ArticleChanges, ArticleSearchParams, ArticleStatus, SortField, SortOrder
from categories.application.services import seed_default_categories
from conftest import ARTICLE_FIELDS
from locks.application.services import acquire_lock
from shared.exceptions import (
    AuthorizationError,
    BadRequestError,
    InvalidTransitionError,
    NotFoundError,
    ResourceLockedError,
    ValidationFailedError,
)
from shared.infrastructure.unit_of_work import DbUnitOfWork


async def _new(uow, principal, **overrides):
    return await create_article(uow, principal, **{**ARTICLE_FIELDS, **overrides})


async def _category_count(uow, name):
    category = await uow.categories.get_by_name(name)
    return category.article_count


async def test_create_article_starts_as_draft_with_first_version(uow, author):
    article = await _new(uow, author)

    assert article.status == ArticleStatus.DRAFT
    assert article.version == 1
    assert article.author_id == author.id
    assert article.author_name == "Alice Author"

    versions = await uow.versions.list_for_article(article.id)
    assert [v.version for v in versions] == [1]
    assert versions[0].change_reason == "Initial creation"
    assert versions[0].change_summary == "Initial version created"


async def test_create_article_counts_towards_category(uow, author):
    await seed_default_categories(uow)
    await _new(uow, author)
    assert await _category_count(uow, "Network") == 1


async def test_create_article_requires_create_permission(uow, actor):
    with pytest.raises(AuthorizationError):
        await _new(uow, actor)


async def test_create_article_reports_every_invalid_field(uow, author):
    with pytest.raises(ValidationFailedError) as exc_info:
        await create_article(
            uow,
            author,
            title="ab",
            body="short",
            category="",
            tags=[f"tag{i}" for i in range(11)],
        )
    assert set(exc_info.value.validation_errors) == {"title", "body", "category", "tags"}
    assert await uow.articles.search(ArticleSearchParams(), author.id, True) == ([], 0)


async def test_update_bumps_version_and_snapshots(uow, author):
    article = await _new(uow, author)
    updated = await update_article(
        uow, author, article.id, ArticleChanges(title="Resetting a hardware token"), reason="Clarify"
    )

    assert updated.version == 2
    assert updated.title == "Resetting a hardware token"
    versions = await uow.versions.list_for_article(article.id)
    assert [v.version for v in versions] == [2, 1]
    assert versions[0].title == "Resetting a hardware token"
    assert versions[0].change_reason == "Clarify"
    assert versions[0].change_summary == "Updated to version 2"


async def test_update_requires_some_field(uow, author):
    article = await _new(uow, author)
    with pytest.raises(BadRequestError):
        await update_article(uow, author, article.id, ArticleChanges())


async def test_update_by_other_author_is_forbidden(uow, author, other_author):
    article = await _new(uow, author)
    await publish_article(uow, author, article.id)
    with pytest.raises(AuthorizationError):
        await update_article(uow, other_author, article.id, ArticleChanges(title="Hijacked title"))


async def test_update_of_others_draft_is_not_found(uow, author, other_author):
    article = await _new(uow, author)
    with pytest.raises(NotFoundError):
        await update_article(uow, other_author, article.id, ArticleChanges(title="Hijacked title"))


async def test_update_blocked_by_someone_elses_lock(uow, author, editor):
    article = await _new(uow, author)
    result = await acquire_lock(uow, editor, article.id)
    assert result.success

    with pytest.raises(ResourceLockedError) as exc_info:
        await update_article(uow, author, article.id, ArticleChanges(title="Another title"))
    assert exc_info.value.holder_name == "Eve Editor"
    assert (await uow.articles.get_by_id(article.id)).version == 1


async def test_update_allowed_for_lock_holder(uow, author):
    article = await _new(uow, author)
    await acquire_lock(uow, author, article.id)
    updated = await update_article(uow, author, article.id, ArticleChanges(body="A brand new body text"))
    assert updated.version == 2
    assert updated.locked_by == author.id
    assert updated.is_locked


async def test_update_moves_category_counts(uow, author):
    await seed_default_categories(uow)
    article = await _new(uow, author)
    await update_article(uow, author, article.id, ArticleChanges(category="Security"))

    assert await _category_count(uow, "Network") == 0
    assert await _category_count(uow, "Security") == 1


async def test_update_rejects_invalid_fields_without_side_effects(uow, author):
    article = await _new(uow, author)
    with pytest.raises(ValidationFailedError) as exc_info:
        await update_article(uow, author, article.id, ArticleChanges(title="no", body="tiny"))
    assert set(exc_info.value.validation_errors) == {"title", "body"}
    assert len(await uow.versions.list_for_article(article.id)) == 1


async def test_concurrent_updates_serialize(session_factory, author):
    async with session_factory() as session:
        article = await _new(DbUnitOfWork(session), author)

    async def edit(title):
        async with session_factory() as session:
            return await update_article(
                DbUnitOfWork(session), author, article.id, ArticleChanges(title=title)
            )

    results = await asyncio.gather(edit("First concurrent title"), edit("Second concurrent title"))

    assert sorted(r.version for r in results) == [2, 3]
    async with session_factory() as session:
        versions = await DbUnitOfWork(session).versions.list_for_article(article.id)
    assert [v.version for v in versions] == [3, 2, 1]


async def test_lock_cannot_be_taken_while_update_is_writing(session_factory, author, editor):
    async with session_factory() as session:
        article = await _new(DbUnitOfWork(session), author)

    writing = asyncio.Event()
    resume = asyncio.Event()

    async with session_factory() as edit_session, session_factory() as lock_session:
        edit_uow = DbUnitOfWork(edit_session)
        persist = edit_uow.articles.update

        async def paused_update(*args, **kwargs):
            writing.set()
            await resume.wait()
            return await persist(*args, **kwargs)

        edit_uow.articles.update = paused_update

        editing = asyncio.create_task(
            update_article(edit_uow, editor, article.id, ArticleChanges(title="Editor rewrite"))
        )
        await writing.wait()
        locking = asyncio.create_task(acquire_lock(DbUnitOfWork(lock_session), author, article.id))
        await asyncio.sleep(0.05)
        assert not locking.done()

        resume.set()
        updated = await editing
        result = await locking

    assert updated.version == 2
    assert result.success
    async with session_factory() as session:
        uow = DbUnitOfWork(session)
        assert (await uow.locks.get(article.id)).locked_by == author.id
        assert (await uow.articles.get_by_id(article.id)).title == "Editor rewrite"


async def test_update_does_not_modify_callers_changes(uow, author):
    article = await _new(uow, author)
    changes = ArticleChanges(title="  Padded title  ", tags=["vpn", "VPN", " "])

    updated = await update_article(uow, author, article.id, changes)

    assert updated.title == "Padded title"
    assert updated.tags == ["vpn"]
    assert changes.title == "  Padded title  "
    assert changes.tags == ["vpn", "VPN", " "]


async def test_update_can_clear_expiration_date(uow, author):
    article = await _new(uow, author, expiration_date=datetime(2030, 1, 1, tzinfo=timezone.utc))
    assert article.expiration_date is not None

    kept = await update_article(uow, author, article.id, ArticleChanges(body="Still valid body text"))
    assert kept.expiration_date == datetime(2030, 1, 1, tzinfo=timezone.utc)

    cleared = await update_article(
        uow, author, article.id, ArticleChanges(clear_expiration_date=True)
    )
    assert cleared.expiration_date is None
    assert cleared.version == 3


async def test_version_count_tracks_article_version(uow, author, editor):
    await seed_default_categories(uow)
    article = await _new(uow, author)
    await update_article(uow, author, article.id, ArticleChanges(category="Security"))
    await publish_article(uow, author, article.id)
    await delete_article(uow, author, article.id)
    await restore_article(uow, editor, article.id)
    await restore_article_version(uow, editor, article.id, 1)

    current = await uow.articles.get_by_id(article.id)
    assert current.version == 6
    assert await uow.versions.count_for_article(article.id) == 6
    assert await _category_count(uow, "Network") == 1
    assert await _category_count(uow, "Security") == 0


async def test_publish_and_archive(uow, author, editor):
    article = await _new(uow, author)
    published = await publish_article(uow, author, article.id)
    assert published.status == ArticleStatus.PUBLISHED
    assert published.published_at is not None
    assert published.version == 2

    archived = await archive_article(uow, editor, article.id)
    assert archived.status == ArticleStatus.ARCHIVED

    versions = await uow.versions.list_for_article(article.id)
    assert [v.change_reason for v in versions] == ["Archived", "Published", "Initial creation"]
    assert versions[0].change_summary == "Updated to version 3. Archived"


async def test_author_cannot_archive(uow, author):
    article = await _new(uow, author)
    await publish_article(uow, author, article.id)
    with pytest.raises(AuthorizationError):
        await archive_article(uow, author, article.id)


async def test_archived_article_cannot_be_republished(uow, author, editor):
    article = await _new(uow, author)
    await publish_article(uow, author, article.id)
    await archive_article(uow, editor, article.id)
    with pytest.raises(InvalidTransitionError, match="Only draft"):
        await publish_article(uow, editor, article.id)


async def test_soft_delete_releases_lock_and_decrements_count(uow, author):
    await seed_default_categories(uow)
    article = await _new(uow, author)
    await acquire_lock(uow, author, article.id)

    deleted = await delete_article(uow, author, article.id)

    assert deleted.status == ArticleStatus.DELETED
    assert await uow.locks.get(article.id) is None
    assert await _category_count(uow, "Network") == 0
    latest = (await uow.versions.list_for_article(article.id))[0]
    assert latest.change_reason == "Moved to trash"


async def test_restore_from_trash_returns_to_draft(uow, author):
    await seed_default_categories(uow)
    article = await _new(uow, author)
    await publish_article(uow, author, article.id)
    await delete_article(uow, author, article.id)

    restored = await restore_article(uow, author, article.id)

    assert restored.status == ArticleStatus.DRAFT
    assert await _category_count(uow, "Network") == 1
    assert (await uow.versions.list_for_article(article.id))[0].change_reason == "Restored from trash"


async def test_restore_requires_deleted_status(uow, author):
    article = await _new(uow, author)
    with pytest.raises(InvalidTransitionError, match="not in trash"):
        await restore_article(uow, author, article.id)


async def test_cannot_edit_deleted_article(uow, author):
    article = await _new(uow, author)
    await delete_article(uow, author, article.id)
    with pytest.raises(BadRequestError):
        await update_article(uow, author, article.id, ArticleChanges(title="Back from the dead"))


async def test_deleted_article_hidden_from_other_readers(uow, author, reader):
    article = await _new(uow, author)
    await publish_article(uow, author, article.id)
    await delete_article(uow, author, article.id)
    with pytest.raises(NotFoundError):
        await get_article(uow, reader, article.id)


async def test_restore_to_version_creates_new_version(uow, author):
    await seed_default_categories(uow)
    article = await _new(uow, author)
    await update_article(
        uow, author, article.id, ArticleChanges(title="Totally different title", category="Security")
    )

    snapshot = await restore_article_version(uow, author, article.id, 1)

    assert snapshot.version == 3
    assert snapshot.title == ARTICLE_FIELDS["title"]
    assert snapshot.change_reason == "Restored from version 1"
    current = await uow.articles.get_by_id(article.id)
    assert current.version == 3
    assert current.category == "Network"
    assert await _category_count(uow, "Network") == 1
    assert await _category_count(uow, "Security") == 0


async def test_restore_to_current_version_rejected(uow, author):
    article = await _new(uow, author)
    with pytest.raises(BadRequestError):
        await restore_article_version(uow, author, article.id, 1)


async def test_restore_to_missing_version_not_found(uow, author):
    article = await _new(uow, author)
    with pytest.raises(NotFoundError):
        await restore_article_version(uow, author, article.id, 7)


async def test_permanent_delete_purges_everything(uow, author, editor):
    article = await _new(uow, author)
    await delete_article(uow, author, article.id)

    await permanently_delete_article(uow, editor, article.id)

    assert await uow.articles.get_by_id(article.id) is None
    assert await uow.versions.list_for_article(article.id) == []


async def test_permanent_delete_requires_trash_and_editor(uow, author, editor):
    article = await _new(uow, author)
    with pytest.raises(BadRequestError):
        await permanently_delete_article(uow, editor, article.id)

    await delete_article(uow, author, article.id)
    with pytest.raises(AuthorizationError):
        await permanently_delete_article(uow, author, article.id)


async def test_get_published_article_counts_views(uow, author, reader):
    article = await _new(uow, author)
    await publish_article(uow, author, article.id)

    first = await get_article(uow, reader, article.id)
    second = await get_article(uow, reader, article.id)

    assert first.view_count == 1
    assert second.view_count == 2
    assert second.last_viewed_by == reader.id
    assert second.version == 2


async def test_draft_visibility(uow, author, other_author, editor, reader):
    article = await _new(uow, author)

    assert (await get_article(uow, author, article.id)).id == article.id
    assert (await get_article(uow, editor, article.id)).view_count == 0
    for outsider in (other_author, reader):
        with pytest.raises(NotFoundError):
            await get_article(uow, outsider, article.id)


async def test_get_missing_article(uow, reader):
    with pytest.raises(NotFoundError):
        await get_article(uow, reader, uuid4())


async def test_search_filters_and_hides_other_drafts(uow, author, other_author):
    mine = await _new(uow, author, title="Printer jams on floor three", tags=["printer"])
    await publish_article(uow, author, mine.id)
    await _new(uow, author, title="Printer driver rollout plan", tags=["printer", "drivers"])
    await _new(uow, other_author, title="Secret printer draft", tags=["printer"])

    page = await search_articles(uow, author, ArticleSearchParams(query="PRINTER"))
    assert {a.title for a in page.items} == {"Printer jams on floor three", "Printer driver rollout plan"}

    page = await search_articles(uow, other_author, ArticleSearchParams(tags=["printer"]))
    assert {a.title for a in page.items} == {"Printer jams on floor three", "Secret printer draft"}

    page = await search_articles(
        uow, author, ArticleSearchParams(tags=["printer", "drivers"], statuses=[ArticleStatus.DRAFT])
    )
    assert [a.title for a in page.items] == ["Printer driver rollout plan"]


async def test_search_sorts_and_paginates(uow, author):
    for title in ("Charlie article", "Alpha article", "Bravo article"):
        await _new(uow, author, title=title)

    page = await search_articles(
        uow,
        author,
        ArticleSearchParams(sort_by=SortField.BRIEF_TITLE, sort_order=SortOrder.ASC, page=1, limit=2),
    )
    assert [a.title for a in page.items] == ["Alpha article", "Bravo article"]
    assert page.total_items == 3
    assert page.total_pages == 2
    assert page.has_next_page
    assert not page.has_previous_page


async def test_search_excludes_deleted(uow, author):
    article = await _new(uow, author)
    await delete_article(uow, author, article.id)
    page = await search_articles(uow, author, ArticleSearchParams())
    assert page.total_items == 0


async def test_search_rejects_bad_paging(uow, reader):
    with pytest.raises(BadRequestError):
        await search_articles(uow, reader, ArticleSearchParams(limit=101))
    with pytest.raises(BadRequestError):
        await search_articles(uow, reader, ArticleSearchParams(page=0))


async def test_reader_cannot_use_advanced_filters(uow, reader):
    with pytest.raises(AuthorizationError):
        await search_articles(uow, reader, ArticleSearchParams(author_id="author-1"))


async def test_search_reports_live_locks(uow, author, editor):
    article = await _new(uow, author)
    await acquire_lock(uow, author, article.id)
    page = await search_articles(uow, editor, ArticleSearchParams())
    assert page.items[0].is_locked
    assert page.items[0].locked_by_name == "Alice Author"


async def test_list_tags_most_used_first(uow, author):
    await _new(uow, author, tags=["vpn", "token"])
    await _new(uow, author, tags=["vpn"])
    tags = await list_tags(uow, author)
    assert [(t.name, t.count) for t in tags] == [("vpn", 2), ("token", 1)]


async def test_related_articles(uow, author):
    base = await _new(uow, author, category="Network", tags=["vpn"])
    explicit = await _new(uow, author, category="Security", tags=["mfa"])
    same_tag = await _new(uow, author, category="Applications", tags=["vpn"])
    unpublished = await _new(uow, author, category="Network", tags=["vpn"])
    for article in (explicit, same_tag):
        await publish_article(uow, author, article.id)
    await update_article(uow, author, base.id, ArticleChanges(related_articles=[str(explicit.id)]))

    found = await related_articles(uow, author, base.id)

    assert [a.id for a in found] == [explicit.id, same_tag.id]
    assert unpublished.id not in {a.id for a in found}
