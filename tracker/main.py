import csv
from io import StringIO
from pathlib import Path

from fastapi import FastAPI, Form, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from .db import init_db
from .logging_setup import configure_logging, get_logger
from .logic import (
    coerce_edited_amount,
    parse_amount,
    parse_balance,
    parse_category,
    parse_date,
    validate_type,
)
from .models import TRANSACTION_TYPES
from .reports import (
    RANGE_OPTIONS,
    filter_by_range,
    recent_transactions,
    resolve_range,
    summarize,
)
from .settings import Settings, get_settings
from .state import FinanceState
from .storage import SqliteKeyValueStore

logger = get_logger("tracker.main")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def build_state(settings: Settings) -> FinanceState:
    init_db(settings)
    return FinanceState.load(SqliteKeyValueStore(settings.db_path))


def _state(request: Request) -> FinanceState:
    return request.app.state.finance


def _resolve_range(
    range_option: str | None, start: str | None, end: str | None
) -> tuple[str, str | None, str | None]:
    option = range_option if range_option in RANGE_OPTIONS else "All Time"
    resolved_start, resolved_end = resolve_range(
        option, custom_start=start, custom_end=end
    )
    return option, resolved_start, resolved_end


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _filename_bound(value: str | None, default: str) -> str:
    try:
        return parse_date(value)
    except ValueError:
        return default


def index(
    request: Request,
    range_option: str | None = Query(default=None, alias="range"),
    start: str | None = None,
    end: str | None = None,
):
    state = _state(request)
    option, resolved_start, resolved_end = _resolve_range(range_option, start, end)
    summary = summarize(state.transactions, resolved_start, resolved_end)
    in_range = filter_by_range(state.transactions, resolved_start, resolved_end)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "range_options": RANGE_OPTIONS,
            "range": option,
            "start": resolved_start,
            "end": resolved_end,
            "summary": summary,
            "recent": recent_transactions(in_range),
            "current_balance": state.current_balance(),
        },
    )


def add_page(request: Request, type: str = "income"):
    state = _state(request)
    selected = type if type in TRANSACTION_TYPES else "income"
    return templates.TemplateResponse(
        request,
        "add.html",
        {
            "types": TRANSACTION_TYPES,
            "selected_type": selected,
            "categories": state.categories_for(selected),
        },
    )


def edit_page(request: Request):
    state = _state(request)
    return templates.TemplateResponse(
        request,
        "edit.html",
        {
            "transactions": state.transactions,
            "types": TRANSACTION_TYPES,
            "categories": {t: state.categories_for(t) for t in TRANSACTION_TYPES},
            "current_balance": state.current_balance(),
        },
    )


def create_transaction(
    request: Request,
    type: str = Form(...),
    amount: str = Form(...),
    category: str = Form(...),
    date: str = Form(...),
):
    try:
        candidate = {
            "type": validate_type(type),
            "amount": parse_amount(amount),
            "category": parse_category(category),
            "date": parse_date(date),
        }
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    _state(request).add_transaction(candidate)
    return _redirect(f"/add?type={candidate['type']}")


def update_transaction(
    txn_id: int,
    request: Request,
    field: str = Form(...),
    value: str = Form(...),
):
    if field == "amount":
        new_value = coerce_edited_amount(value)
    elif field == "type":
        try:
            new_value = validate_type(value)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    elif field in ("category", "date"):
        new_value = value
    else:
        raise HTTPException(status_code=400, detail=f"unknown field: {field}")

    _state(request).update_transaction(txn_id, field, new_value)
    return _redirect("/edit")


def delete_transaction(txn_id: int, request: Request):
    _state(request).delete_transaction(txn_id)
    return _redirect("/edit")


def set_balance(request: Request, value: str = Form(...)):
    parsed = parse_balance(value)
    if parsed is None:
        logger.info("Ignored balance input %r", value)
    else:
        _state(request).set_balance_checkpoint(parsed)
    return _redirect("/edit")


def create_category(
    request: Request,
    type: str = Form(...),
    name: str = Form(...),
):
    state = _state(request)
    try:
        valid_type = validate_type(type)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not name.strip():
        raise HTTPException(status_code=400, detail="Category name cannot be blank.")
    if state.category_exists(valid_type, name):
        raise HTTPException(status_code=400, detail="That category already exists.")

    state.add_custom_category(valid_type, name)
    return _redirect("/edit")


def api_state(request: Request):
    state = _state(request)
    snapshot = state.snapshot()
    snapshot["categories"] = {t: state.categories_for(t) for t in TRANSACTION_TYPES}
    return JSONResponse(snapshot)


def export_csv(
    request: Request,
    range_option: str | None = Query(default=None, alias="range"),
    start: str | None = None,
    end: str | None = None,
):
    state = _state(request)
    _, resolved_start, resolved_end = _resolve_range(range_option, start, end)
    transactions = filter_by_range(state.transactions, resolved_start, resolved_end)

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(["id", "date", "type", "amount", "category"])
    for txn in transactions:
        writer.writerow(
            [txn.id, txn.date, txn.type, f"{txn.amount:.2f}", txn.category]
        )

    body = "\ufeff" + output.getvalue()
    filename = (
        f"transactions-{_filename_bound(resolved_start, 'all')}"
        f"-to-{_filename_bound(resolved_end, 'now')}.csv"
    )
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def create_app(state: FinanceState | None = None) -> FastAPI:
    if state is None:
        settings = get_settings()
        configure_logging(settings)
        state = build_state(settings)

    app = FastAPI()
    app.state.finance = state

    app.add_api_route("/", index, methods=["GET"], response_class=HTMLResponse)
    app.add_api_route("/add", add_page, methods=["GET"], response_class=HTMLResponse)
    app.add_api_route("/edit", edit_page, methods=["GET"], response_class=HTMLResponse)
    app.add_api_route("/transactions", create_transaction, methods=["POST"])
    app.add_api_route(
        "/transactions/{txn_id}/update", update_transaction, methods=["POST"]
    )
    app.add_api_route(
        "/transactions/{txn_id}/delete", delete_transaction, methods=["POST"]
    )
    app.add_api_route("/balance", set_balance, methods=["POST"])
    app.add_api_route("/categories", create_category, methods=["POST"])
    app.add_api_route("/api/state", api_state, methods=["GET"])
    app.add_api_route("/export.csv", export_csv, methods=["GET"])
    return app
