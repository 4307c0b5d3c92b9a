"""
Current directory, selection and search state over a TreeStore.

All listings are derived from the store on demand and never mutate it.
"""

from typing import Callable, List, Optional

from ..events import NavigationChangedEvent
from .constants import ROOT_ID
from .store import TreeStore
from .types import BreadcrumbItem, FileRecord


class Navigator:
    def __init__(
        self,
        store: TreeStore,
        on_change: Optional[Callable[[NavigationChangedEvent], None]] = None,
    ):
        self.store = store
        self._on_change = on_change
        self._current_directory: Optional[str] = ROOT_ID
        self._selection: List[str] = []
        self._search_term = ""

    @property
    def current_directory(self) -> Optional[str]:
        return self._current_directory

    @property
    def selection(self) -> List[str]:
        return list(self._selection)

    @property
    def search_term(self) -> str:
        return self._search_term

    def _notify(self) -> None:
        if self._on_change is None:
            return
        self._on_change(
            NavigationChangedEvent(
                current_directory=self._current_directory,
                selection=self.selection,
                search_term=self._search_term,
            )
        )

    def navigate(self, directory_id: Optional[str]) -> None:
        """Show ``directory_id``; unknown ids simply list nothing."""
        self._current_directory = directory_id
        self._selection = []
        self._notify()

    def toggle_select(self, file_id: str) -> None:
        if file_id in self._selection:
            self._selection.remove(file_id)
        else:
            self._selection.append(file_id)
        self._notify()

    def clear_selection(self) -> None:
        self._selection = []
        self._notify()

    def select_all(self) -> None:
        self._selection = [f.id for f in self.current_directory_files()]
        self._notify()

    def set_search_term(self, term: str) -> None:
        self._search_term = term
        self._notify()

    def get_file(self, file_id: str) -> Optional[FileRecord]:
        return self.store.get(file_id)

    def current_directory_files(self) -> List[FileRecord]:
        """Children of the current directory; with no directory, the top-level records."""
        return self.store.children_of(self._current_directory)

    def search(self, term: Optional[str] = None) -> List[FileRecord]:
        """Records whose name or content contains the term, across the whole tree."""
        needle = (self._search_term if term is None else term).lower()
        if not needle:
            return []
        return [
            f
            for f in self.store.records
            if needle in f.name.lower() or (f.content and needle in f.content.lower())
        ]

    def visible_files(self) -> List[FileRecord]:
        if self._search_term:
            return self.search()
        return self.current_directory_files()

    def breadcrumb(self, file_id: Optional[str] = None) -> List[BreadcrumbItem]:
        """Path from the root down to ``file_id`` (default: current directory)."""
        target = self._current_directory if file_id is None else file_id
        path: List[BreadcrumbItem] = []
        seen = set()
        record = self.store.get(target) if target is not None else None
        while record is not None and record.id not in seen:
            seen.add(record.id)
            path.append(BreadcrumbItem(id=record.id, name=record.name))
            record = self.store.get(record.parent_id) if record.parent_id else None
        path.reverse()
        return path
