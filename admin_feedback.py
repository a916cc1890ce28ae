# admin_feedback.py

import html
import logging
from datetime import datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, Query
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models import Feedback, User
from dependencies import get_db_session
from auth_utils import get_current_user
from order_service import feedback_to_dict
from pagination import DEFAULT_PAGE_SIZE, page_count, clamp_page, clamp_size, render_pagination
from templates import render_admin_page, stars, ADMIN_FEEDBACK_BODY
from translations import t, get_language
from validation import ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)

SORT_OPTIONS = {
    "date_desc": (Feedback.created_at.desc(), Feedback.id.desc()),
    "date_asc": (Feedback.created_at.asc(), Feedback.id.asc()),
    "rating_desc": (Feedback.rating.desc(), Feedback.created_at.desc(), Feedback.id.desc()),
    "rating_asc": (Feedback.rating.asc(), Feedback.created_at.desc(), Feedback.id.desc()),
}
SORT_LABELS = {
    "date_desc": "Newest first",
    "date_asc": "Oldest first",
    "rating_desc": "Highest rating",
    "rating_asc": "Lowest rating",
}


def parse_day(value: Optional[str], label: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValidationError([f"{label} must use the YYYY-MM-DD format"])


def filtered_feedback(user: User, rating: Optional[int], order_number: Optional[str],
                      start_date: Optional[str], end_date: Optional[str]):
    """All filters combine; dates are inclusive whole days."""
    query = select(Feedback).where(Feedback.user_id == user.id)
    if rating:
        if not 1 <= rating <= 5:
            raise ValidationError(["Rating must be between 1 and 5"])
        query = query.where(Feedback.rating == rating)
    if order_number and order_number.strip():
        query = query.where(Feedback.order_number.ilike(f"%{order_number.strip()}%"))
    start = parse_day(start_date, "Start date")
    end = parse_day(end_date, "End date")
    if start:
        query = query.where(Feedback.created_at >= datetime.combine(start.date(), time.min))
    if end:
        query = query.where(Feedback.created_at <= datetime.combine(end.date(), time.max))
    return query


async def feedback_page(session: AsyncSession, user: User, page: int, size: int, rating: Optional[int],
                        order_number: Optional[str], start_date: Optional[str], end_date: Optional[str],
                        sort_by: str) -> dict:
    query = filtered_feedback(user, rating, order_number, start_date, end_date)
    size = clamp_size(size)
    total = (await session.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    page = clamp_page(page, total, size)
    order_by = SORT_OPTIONS.get(sort_by, SORT_OPTIONS["date_desc"])
    res = await session.execute(query.order_by(*order_by).offset((page - 1) * size).limit(size))
    return {
        "entries": res.scalars().all(),
        "current_page": page,
        "total_pages": page_count(total, size),
        "total_items": total,
    }


async def feedback_stats(session: AsyncSession, user: User) -> dict:
    res = await session.execute(
        select(Feedback.rating, func.count(Feedback.id))
        .where(Feedback.user_id == user.id)
        .group_by(Feedback.rating)
    )
    distribution = {str(r): 0 for r in range(1, 6)}
    total = 0
    rating_sum = 0
    for rating, count in res.all():
        distribution[str(rating)] = count
        total += count
        rating_sum += rating * count
    average = 0.0
    if total:
        average = float((Decimal(rating_sum) / Decimal(total)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    return {"total_feedback": total, "average_rating": average, "rating_distribution": distribution}


async def get_owned_feedback(session: AsyncSession, user: User, feedback_id: int) -> Feedback:
    fb = await session.get(Feedback, feedback_id)
    if not fb or fb.user_id != user.id:
        raise HTTPException(status_code=404, detail="Feedback not found")
    return fb


# --- JSON API ---

@router.get("/api/feedback")
async def api_list_feedback(
    page: int = Query(1),
    size: int = Query(DEFAULT_PAGE_SIZE),
    rating: Optional[int] = Query(None),
    order_number: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    sort_by: str = Query("date_desc"),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    result = await feedback_page(session, user, page, size, rating, order_number, start_date, end_date, sort_by)
    result["entries"] = [feedback_to_dict(f) for f in result["entries"]]
    return result


@router.get("/api/feedback/stats")
async def api_feedback_stats(session: AsyncSession = Depends(get_db_session), user: User = Depends(get_current_user)):
    return await feedback_stats(session, user)


@router.get("/api/feedback/{feedback_id}")
async def api_get_feedback(feedback_id: int, session: AsyncSession = Depends(get_db_session),
                           user: User = Depends(get_current_user)):
    return feedback_to_dict(await get_owned_feedback(session, user, feedback_id))


@router.delete("/api/feedback/{feedback_id}", status_code=204)
async def api_delete_feedback(feedback_id: int, session: AsyncSession = Depends(get_db_session),
                              user: User = Depends(get_current_user)):
    fb = await get_owned_feedback(session, user, feedback_id)
    await session.delete(fb)
    await session.commit()
    return Response(status_code=204)


# --- HTML pages ---

@router.get("/admin/feedback", response_class=HTMLResponse)
async def admin_feedback(
    request: Request,
    page: int = Query(1),
    rating: Optional[str] = Query(None),
    order_number: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    sort_by: str = Query("date_desc"),
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user)
):
    lang = get_language(request)
    rating_value = int(rating) if rating and rating.isdigit() and 1 <= int(rating) <= 5 else None
    try:
        result = await feedback_page(session, user, page, DEFAULT_PAGE_SIZE, rating_value, order_number,
                                     start_date, end_date, sort_by)
    except ValidationError:
        start_date = end_date = None
        result = await feedback_page(session, user, page, DEFAULT_PAGE_SIZE, rating_value, order_number,
                                     None, None, sort_by)
    stats = await feedback_stats(session, user)

    rows = []
    for fb in result["entries"]:
        amount = f"{fb.total_amount:.2f}" if fb.total_amount is not None else "-"
        rows.append(f"""
        <tr>
            <td>{fb.created_at.strftime('%d.%m.%Y %H:%M')}</td>
            <td>{html.escape(fb.order_number or '-')}</td>
            <td>{html.escape(fb.table_number or '-')}</td>
            <td>{amount}</td>
            <td>{stars(fb.rating)}</td>
            <td style="max-width: 320px;">{html.escape(fb.comments or '')}</td>
            <td class="actions">
                <a href="/admin/feedback/{fb.id}/delete" onclick="return confirm('Delete this feedback?');" class="button-sm danger"><i class="fa-solid fa-trash"></i></a>
            </td>
        </tr>""")

    distribution = "".join(
        f'<div class="stat"><div class="label">{stars(int(r))}</div><div class="value">{c}</div></div>'
        for r, c in sorted(stats["rating_distribution"].items(), reverse=True)
    )
    rating_options = "".join(
        f'<option value="{r}" {"selected" if r == rating_value else ""}>{r} ★</option>' for r in range(5, 0, -1)
    )
    sort_options = "".join(
        f'<option value="{k}" {"selected" if k == sort_by else ""}>{v}</option>' for k, v in SORT_LABELS.items()
    )
    query_string = urlencode({
        "rating": rating_value or "", "order_number": order_number or "",
        "start_date": start_date or "", "end_date": end_date or "", "sort_by": sort_by,
    })
    body = ADMIN_FEEDBACK_BODY.format(
        total_feedback=stats["total_feedback"],
        average_rating=f"{stats['average_rating']:.1f}",
        distribution=distribution,
        rating_options=rating_options,
        order_number=html.escape(order_number or ""),
        start_date=html.escape(start_date or ""),
        end_date=html.escape(end_date or ""),
        sort_options=sort_options,
        rows="".join(rows) or f"<tr><td colspan='7'>{t('no_data', lang)}</td></tr>",
        pagination=render_pagination(result["current_page"], result["total_pages"], f"/admin/feedback?{query_string}&"),
        order_number_label=t("order_number", lang),
        date_label=t("date", lang),
        table_label=t("table", lang),
        total_label=t("total", lang),
        rating_label=t("rating", lang),
        comments_label=t("comments", lang),
        actions_label=t("actions", lang),
    )
    return render_admin_page(t("feedback", lang), body, "feedback", user, lang, str(request.url.path))


@router.get("/admin/feedback/{feedback_id}/delete")
async def admin_delete_feedback(feedback_id: int, session: AsyncSession = Depends(get_db_session),
                                user: User = Depends(get_current_user)):
    fb = await get_owned_feedback(session, user, feedback_id)
    await session.delete(fb)
    await session.commit()
    return RedirectResponse(url="/admin/feedback", status_code=303)
