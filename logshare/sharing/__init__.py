"""logshare sharing package.

Artifact lifecycle, hand-off presenters and option debouncing. The state
machine lives in ``logshare.sharing.coordinator``.
"""

from logshare.sharing.artifact import ArtifactHandle, HandleState
from logshare.sharing.debounce import Debouncer
from logshare.sharing.presenter import CallbackPresenter, Presenter, SaveAsPresenter

__all__ = [
    "ArtifactHandle",
    "HandleState",
    "Debouncer",
    "Presenter",
    "CallbackPresenter",
    "SaveAsPresenter",
]
