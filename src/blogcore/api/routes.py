"""HTTP routes: public listings and search, the contact form, and the admin write path"""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session, SQLModel
from starlette.datastructures import UploadFile

from blogcore.api.assets import AssetStore
from blogcore.api.dependencies import get_asset_store, get_session, get_settings, require_admin
from blogcore.api.schemas import ContactRequest, ContactTriageRequest, SlugCheckRequest
from blogcore.config import Settings
from blogcore.core.decode.form import FormValue, decode_form
from blogcore.core.query.compose import compose
from blogcore.core.query.models import ResourceKind
from blogcore.core.query.params import Params, first
from blogcore.core.utils.coerce import parse_bool
from blogcore.crud import categories as category_store
from blogcore.crud import contacts as contact_store
from blogcore.crud import posts as post_store
from blogcore.crud.categories import SqlCategoryResolver
from blogcore.crud.listing import ListingPage, run_listing
from blogcore.crud.models import Contact, Post


logger = logging.getLogger(__name__)

router = APIRouter()

FEATURED_IMAGE_FIELD = "featuredImage"


def flatten_multi(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Collapse (key, value) pairs into a mapping; a repeated key keeps every value in a list."""
    flat: dict[str, Any] = {}
    for key, value in items:
        if key not in flat:
            flat[key] = value
        elif isinstance(flat[key], list):
            flat[key].append(value)
        else:
            flat[key] = [flat[key], value]
    return flat


def serialize_post(post: Post, full_content: bool = False) -> dict[str, Any]:
    data = post.model_dump(mode="json", exclude={"body_text"})
    data["tags"] = post_store.post_tags(post)
    if not full_content:
        data.pop("blocks", None)
    return data


def _dump(row: SQLModel) -> dict[str, Any]:
    return row.model_dump(mode="json")


def _envelope(page: ListingPage, dump: Callable[[Any], dict[str, Any]]) -> dict[str, Any]:
    return {
        "success": page.success,
        "count": page.count,
        "total": page.total,
        "pagination": page.pagination.model_dump(exclude_none=True),
        "data": [dump(row) for row in page.data],
    }


def _listing(
    kind: ResourceKind,
    params: Params,
    session: Session,
    settings: Settings,
    privileged: bool,
    ) -> ListingPage:
    spec = compose(kind, params, privileged=privileged, resolver=SqlCategoryResolver(session), settings=settings)
    logger.debug("Listing %s: %d condition(s), page %d, limit %d", kind.value, len(spec.filter.conditions), spec.page, spec.limit)
    return run_listing(session, spec)


def _post_dumper(params: Params) -> Callable[[Post], dict[str, Any]]:
    full = bool(parse_bool(first(params, "fullContent")))
    return lambda post: serialize_post(post, full_content=full)


@router.get("/blogs")
def list_blogs(
    request: Request,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    ):
    params = flatten_multi(request.query_params.multi_items())
    page = _listing(ResourceKind.posts, params, session, settings, privileged=False)
    return _envelope(page, _post_dumper(params))


@router.get("/blogs/search")
def search_blogs(
    request: Request,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    ):
    params = flatten_multi(request.query_params.multi_items())
    if first(params, "q") is None:
        return JSONResponse(status_code=400, content={"success": False, "message": "Search query is required"})
    page = _listing(ResourceKind.post_search, params, session, settings, privileged=False)
    return _envelope(page, _post_dumper(params))


@router.get("/blogs/tags/popular")
def popular_tags(
    limit: int = Query(default=20, ge=1, le=100),
    session: Session = Depends(get_session),
    ):
    tags = post_store.popular_tags(session, limit=limit)
    return {"success": True, "data": [{"tag": name, "count": n} for name, n in tags]}


@router.get("/blogs/category/{category_slug}")
def list_blogs_in_category(
    category_slug: str,
    request: Request,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    ):
    category = category_store.get_by_slug(session, category_slug)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    params = flatten_multi(request.query_params.multi_items())
    params["category"] = category.id
    page = _listing(ResourceKind.posts, params, session, settings, privileged=False)
    body = _envelope(page, _post_dumper(params))
    body["category"] = category.model_dump(mode="json", include={"id", "name", "slug", "description", "color"})
    return body


@router.get("/blogs/slug/{slug}")
def get_blog(slug: str, session: Session = Depends(get_session)):
    post = post_store.get_by_slug(session, slug.lower())
    if post is None or post.status != "published":
        raise HTTPException(status_code=404, detail="Blog not found")
    return {"success": True, "data": serialize_post(post, full_content=True)}


@router.get("/categories")
def list_categories(
    request: Request,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    ):
    params = flatten_multi(request.query_params.multi_items())
    page = _listing(ResourceKind.categories, params, session, settings, privileged=False)
    return _envelope(page, _dump)


@router.post("/contact", status_code=201)
def submit_contact(payload: ContactRequest, session: Session = Depends(get_session)):
    contact = contact_store.submit_contact(
        session,
        name=payload.name,
        email=payload.email,
        phone_number=payload.phoneNumber,
        product_question=payload.productQuestion,
        message=payload.message,
        source=payload.source,
    )
    session.commit()
    logger.info("Contact %s received from %s", contact.id, contact.source)
    return {"success": True, "message": "Thank you for contacting us!", "data": {"id": contact.id}}


@router.get("/admin/blogs")
def admin_list_blogs(
    request: Request,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    _admin: str = Depends(require_admin),
    ):
    params = flatten_multi(request.query_params.multi_items())
    page = _listing(ResourceKind.posts, params, session, settings, privileged=True)
    return _envelope(page, _post_dumper(params))


async def _read_form(request: Request) -> tuple[dict[str, FormValue], Optional[UploadFile]]:
    """Split a submitted form into decoder input and the featured image upload, if any."""
    form = await request.form()
    upload = None
    pairs = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key == FEATURED_IMAGE_FIELD and value.filename:
                upload = value
            continue
        pairs.append((key, value))
    return flatten_multi(pairs), upload


async def _store_image(
    upload: Optional[UploadFile],
    fields: dict[str, FormValue],
    assets: AssetStore,
    ) -> Optional[dict[str, Any]]:
    if upload is None:
        return None
    stored = assets.upload(upload.filename, await upload.read())
    alt = fields.get("featuredImageAlt") or ""
    if isinstance(alt, list):
        alt = alt[-1]
    return {**stored.model_dump(), "alt": alt}


@contextmanager
def _discard_on_error(featured: Optional[dict[str, Any]], assets: AssetStore) -> Iterator[None]:
    """Remove a just-uploaded image if the write it belongs to fails."""
    try:
        yield
    except Exception:
        if featured is not None:
            logger.info("Write failed; removing uploaded asset %s", featured["public_id"])
            assets.delete(featured["public_id"])
        raise


@router.post("/admin/blogs/check-slug")
def check_slug(
    payload: SlugCheckRequest,
    session: Session = Depends(get_session),
    _admin: str = Depends(require_admin),
    ):
    slug, problem = post_store.check_slug(session, payload.slug, exclude_id=payload.excludeId)
    return {
        "success": True,
        "message": problem or "Slug is available",
        "data": {"available": problem is None, "slug": slug},
    }


@router.post("/admin/blogs", status_code=201)
async def create_blog(
    request: Request,
    session: Session = Depends(get_session),
    assets: AssetStore = Depends(get_asset_store),
    admin: str = Depends(require_admin),
    ):
    fields, upload = await _read_form(request)
    document = decode_form(fields)
    featured = await _store_image(upload, fields, assets)
    with _discard_on_error(featured, assets):
        post = post_store.create_post(session, document, author_id=admin, featured_image=featured)
        session.commit()
    session.refresh(post)
    logger.info("Created post %s (%s)", post.id, post.slug)
    return {"success": True, "message": "Blog created successfully", "data": serialize_post(post, full_content=True)}


@router.put("/admin/blogs/{post_id}")
async def update_blog(
    post_id: str,
    request: Request,
    session: Session = Depends(get_session),
    assets: AssetStore = Depends(get_asset_store),
    _admin: str = Depends(require_admin),
    ):
    post = post_store.get_by_id(session, post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog not found")
    fields, upload = await _read_form(request)
    document = decode_form(fields)
    featured = await _store_image(upload, fields, assets)
    with _discard_on_error(featured, assets):
        post = post_store.update_post(session, post, document, featured_image=featured)
        session.commit()
    session.refresh(post)
    logger.info("Updated post %s", post.id)
    return {"success": True, "message": "Blog updated successfully", "data": serialize_post(post, full_content=True)}


@router.delete("/admin/blogs/{post_id}")
def delete_blog(
    post_id: str,
    session: Session = Depends(get_session),
    _admin: str = Depends(require_admin),
    ):
    post = post_store.get_by_id(session, post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog not found")
    post_store.delete_post(session, post)
    session.commit()
    logger.info("Deleted post %s", post_id)
    return {"success": True, "message": "Blog deleted successfully"}


@router.get("/admin/contacts")
def admin_list_contacts(
    request: Request,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    _admin: str = Depends(require_admin),
    ):
    params = flatten_multi(request.query_params.multi_items())
    page = _listing(ResourceKind.contacts, params, session, settings, privileged=True)
    return _envelope(page, _dump)


def _contact_or_404(session: Session, contact_id: str) -> Contact:
    contact = session.get(Contact, contact_id)
    if contact is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return contact


@router.patch("/admin/contacts/{contact_id}/read")
def mark_contact_read(
    contact_id: str,
    session: Session = Depends(get_session),
    admin: str = Depends(require_admin),
    ):
    contact = contact_store.mark_read(session, _contact_or_404(session, contact_id), admin_id=admin)
    session.commit()
    session.refresh(contact)
    return {"success": True, "data": _dump(contact)}


@router.patch("/admin/contacts/{contact_id}")
def triage_contact(
    contact_id: str,
    payload: ContactTriageRequest,
    session: Session = Depends(get_session),
    _admin: str = Depends(require_admin),
    ):
    contact = contact_store.triage(
        session,
        _contact_or_404(session, contact_id),
        status=payload.status,
        priority=payload.priority,
        assigned_to=payload.assignedTo,
    )
    session.commit()
    session.refresh(contact)
    return {"success": True, "data": _dump(contact)}
