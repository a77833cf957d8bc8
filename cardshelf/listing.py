"""View state for a paginated, sortable card list.

Every transition returns a new ``ListState``; nothing is modified in place.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from .forms import CardForm, form_from_card, validate_form


MIN_LIMIT = 10
PAGE_WINDOW = 5


@dataclass(frozen=True)
class EditBuffer:
    card_id: int
    form: CardForm


@dataclass(frozen=True)
class ListState:
    filters: Tuple[Tuple[str, str], ...] = ()
    sort_field: Optional[str] = "id"
    sort_order: Optional[str] = "ASC"
    page: int = 1
    limit: int = MIN_LIMIT
    total: int = 0
    editing: Optional[EditBuffer] = None
    selected: FrozenSet[int] = field(default_factory=frozenset)
    expanded_note: Optional[str] = None

    # -- filters --------------------------------------------------------

    def with_filters(self, filters: Mapping[str, str]) -> "ListState":
        """Replace the search terms and go back to the first page."""
        kept = tuple(sorted((k, v) for k, v in filters.items() if v and str(v).strip()))
        return replace(self, filters=kept, page=1)

    # -- sorting --------------------------------------------------------

    def toggle_sort(self, field_name: str) -> "ListState":
        """Cycle unsorted -> ASC -> DESC -> unsorted on a column header."""
        order: Optional[str]
        if self.sort_field == field_name:
            if self.sort_order == "ASC":
                order = "DESC"
            elif self.sort_order == "DESC":
                order = None
            else:
                order = "ASC"
        else:
            order = "ASC"
        return replace(
            self,
            sort_field=field_name if order else None,
            sort_order=order,
        )

    def sort_arrow(self, field_name: str) -> str:
        if self.sort_field == field_name:
            if self.sort_order == "ASC":
                return " ↑"
            if self.sort_order == "DESC":
                return " ↓"
        return ""

    # -- paging ---------------------------------------------------------

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total

    def page_numbers(self) -> List[int]:
        start = max(self.page - 2, 1)
        end = min(start + PAGE_WINDOW - 1, self.total_pages)
        return list(range(start, end + 1))

    def with_limit(self, value: Any) -> "ListState":
        try:
            limit = int(str(value).strip())
        except ValueError:
            limit = MIN_LIMIT
        return replace(self, limit=max(limit, MIN_LIMIT), page=1)

    def go_to(self, page: Any) -> "ListState":
        """Jump to a page; out-of-range or unparseable input is ignored."""
        try:
            number = int(str(page).strip())
        except ValueError:
            return self
        if 1 <= number <= self.total_pages:
            return replace(self, page=number)
        return self

    def next_page(self) -> "ListState":
        return replace(self, page=self.page + 1) if self.has_next else self

    def previous_page(self) -> "ListState":
        return replace(self, page=self.page - 1) if self.has_previous else self

    def with_result(self, result: Mapping[str, Any]) -> "ListState":
        """Record the paging numbers echoed by a list/search response."""
        return replace(
            self,
            total=int(result.get("total", 0)),
            page=int(result.get("page", self.page)),
            limit=int(result.get("limit", self.limit)),
        )

    def query_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = dict(self.filters)
        params["page"] = self.page
        params["limit"] = self.limit
        if self.sort_field and self.sort_order:
            params["sortField"] = self.sort_field
            params["sortOrder"] = self.sort_order
        return params

    # -- selection ------------------------------------------------------

    def toggle_selected(self, card_id: int) -> "ListState":
        return replace(self, selected=self.selected ^ {card_id})

    def clear_selection(self) -> "ListState":
        return replace(self, selected=frozenset())

    # -- in-place editing -----------------------------------------------

    def start_edit(self, card: Mapping[str, Any]) -> "ListState":
        return replace(self, editing=EditBuffer(card["id"], form_from_card(card)))

    def edit_field(self, name: str, value: Any) -> "ListState":
        if self.editing is None:
            return self
        buffer = EditBuffer(self.editing.card_id, self.editing.form.with_field(name, value))
        return replace(self, editing=buffer)

    def edit_errors(self) -> Dict[str, str]:
        if self.editing is None:
            return {}
        return validate_form(self.editing.form)

    def cancel_edit(self) -> "ListState":
        return replace(self, editing=None)

    # -- note overlay ---------------------------------------------------

    def expand_note(self, note: str) -> "ListState":
        return replace(self, expanded_note=note)

    def close_note(self) -> "ListState":
        return replace(self, expanded_note=None)
