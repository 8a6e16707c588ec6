"""
Per-view coin selection.

The variants a customer has ticked to pay with coins before committing. The
selection belongs to one checkout view: it starts empty, changes only through
toggles, and is thrown away when the view closes or coins are removed. It is
never persisted; it is only the input to a commit.
"""
import logging
from typing import Dict, Iterable, List, Optional

from ..utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


class CoinSelection:
    """
    Ordered set of selected variant ids with toggle/read/clear operations.

    Usage:
        selection = CoinSelection(cart.variant_ids)
        selection.toggle('variant_123')
        selection.selected_variant_ids()   # ['variant_123']
        selection.dispose()
    """

    def __init__(self, allowed_variant_ids: Optional[Iterable[str]] = None):
        self._selections: Dict[str, bool] = {}
        self._allowed = set(allowed_variant_ids) if allowed_variant_ids is not None else None
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def toggle(self, variant_id: str) -> bool:
        """
        Flip a variant's selection.

        Returns:
            The variant's new state (False if the selection is disposed)

        Raises:
            ValidationError: variant is not in the cart
        """
        if self._disposed:
            logger.debug('Ignoring toggle of %s on disposed selection', variant_id)
            return False
        if self._allowed is not None and variant_id not in self._allowed:
            raise ValidationError(f'Variant {variant_id} is not in this cart', 'variant_id')

        self._selections[variant_id] = not self._selections.get(variant_id, False)
        return self._selections[variant_id]

    def is_selected(self, variant_id: str) -> bool:
        return self._selections.get(variant_id, False)

    def selected_variant_ids(self) -> List[str]:
        """Selected ids in the order they were first toggled."""
        return [vid for vid, selected in self._selections.items() if selected]

    def restrict_to(self, variant_ids: Iterable[str]) -> None:
        """Drop selections for variants no longer in the cart."""
        self._allowed = set(variant_ids)
        for variant_id in list(self._selections):
            if variant_id not in self._allowed:
                del self._selections[variant_id]

    def clear(self) -> None:
        self._selections.clear()

    def dispose(self) -> None:
        self._selections.clear()
        self._disposed = True

    @classmethod
    def from_mapping(
        cls,
        selections: Dict[str, bool],
        allowed_variant_ids: Optional[Iterable[str]] = None
    ) -> 'CoinSelection':
        """Rebuild a selection from a client-sent variant_id -> bool mapping."""
        selection = cls(allowed_variant_ids)
        for variant_id, selected in selections.items():
            if selected is True:
                selection.toggle(variant_id)
        return selection

    def __len__(self) -> int:
        return len(self.selected_variant_ids())

    def __repr__(self):
        return f'<CoinSelection {self.selected_variant_ids()}>'
