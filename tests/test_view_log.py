from datetime import datetime

from rich.table import Table

from fitlog.core.results import Err, ErrorKind, Ok
from fitlog.features.view_log import ViewLog, paginate

from conftest import OCT, session


def _month_of(n: int):
    return [session(f"W{i}", datetime(2025, 10, i, 7), datetime(2025, 10, i, 8)) for i in range(1, n + 1)]


def test_paginate_numbers_rows_across_pages():
    page = paginate(OCT, _month_of(12), 2, size=10)
    assert (page.page, page.pages, page.total) == (2, 2, 12)
    assert [(i, s.name) for i, s in page.rows] == [(11, "W11"), (12, "W12")]


def test_paginate_clamps_out_of_range_pages():
    assert paginate(OCT, _month_of(3), 9, size=10).page == 1
    assert paginate(OCT, [], 1, size=10).pages == 1


def test_render_shows_a_table(manager, store, display):
    store.save(OCT, _month_of(12))
    result = ViewLog(manager, page_size=10).render("")
    assert isinstance(result, Ok)
    assert len(result.value.rows) == 10
    assert isinstance(display.shown[-1], Table)


def test_render_warns_when_page_is_clamped(manager, store, display):
    store.save(OCT, _month_of(12))
    assert ViewLog(manager, page_size=10).render("pg/5").value.page == 2
    assert "Showing page 2" in display.of("warn")[-1]


def test_render_empty_month(manager, display):
    ViewLog(manager).render("m/9")
    assert display.of("info")[-1] == "No workouts logged in 2025-09."
    assert display.shown == []


def test_view_log_does_not_switch_loaded_month(manager, store):
    ViewLog(manager).render("ym/09/25")
    assert store.loaded_month == OCT


def test_open_uses_display_numbering(manager, store, display):
    store.save(OCT, [session("Late", datetime(2025, 10, 20, 18), datetime(2025, 10, 20, 19)),
                     session("Early", datetime(2025, 10, 3, 7), datetime(2025, 10, 3, 8))])
    assert ViewLog(manager).open("id/1").value.name == "Early"
    assert len(display.shown) == 1


def test_open_unknown_id(manager, store):
    store.save(OCT, _month_of(2))
    result = ViewLog(manager).open("id/3")
    assert isinstance(result, Err) and result.kind is ErrorKind.NOT_FOUND
