"""Rich renderables for the status bar and the analysis feed."""
from typing import Optional

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from src.constants import (
    LABEL_CLASSIFICATION,
    LABEL_DESCRIPTION,
    MSG_CLASSIFICATION_PENDING,
    MSG_DESCRIPTION_FAILED,
    MSG_DESCRIPTION_PENDING,
    MSG_NO_DESCRIPTION,
    MSG_NOT_AVAILABLE,
    PANEL_TITLE,
    STATUS_COMPLETE,
    STATUS_CREDENTIAL_MISSING,
    STATUS_FAILED,
    STATUS_LOADING,
    STATUS_READY,
    STATUS_STREAMING,
)
from src.state_machine import AnalysisSnapshot, AnalysisState


def status_for(snapshot: AnalysisSnapshot, streaming: bool = False) -> tuple[str, str]:
    """(label, style) for the status bar. Analysis states outrank the camera."""
    match snapshot.state:
        case AnalysisState.LOADING:
            return STATUS_LOADING
        case AnalysisState.COMPLETE:
            return STATUS_COMPLETE
        case AnalysisState.FAILED:
            return STATUS_FAILED
        case AnalysisState.CREDENTIAL_MISSING:
            return STATUS_CREDENTIAL_MISSING
        case _ if streaming:
            return STATUS_STREAMING
        case _:
            return STATUS_READY


def render_status(snapshot: AnalysisSnapshot, streaming: bool = False) -> Text:
    label, style = status_for(snapshot, streaming)
    return Text(f" {label} ", style=style)


def _description(snapshot: AnalysisSnapshot) -> RenderableType:
    match snapshot:
        case AnalysisSnapshot(state=AnalysisState.LOADING):
            return Text(MSG_DESCRIPTION_PENDING, style="italic dim")
        case AnalysisSnapshot(state=AnalysisState.FAILED):
            return Text(MSG_DESCRIPTION_FAILED, style="red")
        case AnalysisSnapshot(result=result) if result is not None:
            lines = result.description_lines()
            if not lines:
                return Text(MSG_NO_DESCRIPTION, style="dim")
            return Group(*(Text(line) for line in lines))
        case _:
            return Text(MSG_NO_DESCRIPTION, style="dim")


def render_snapshot(snapshot: AnalysisSnapshot) -> Optional[RenderableType]:
    """Result card, shown once there is something to show."""
    if snapshot.state not in (AnalysisState.LOADING, AnalysisState.COMPLETE, AnalysisState.FAILED):
        return None

    match snapshot.state:
        case AnalysisState.LOADING:
            classification = Text(MSG_CLASSIFICATION_PENDING, style="bold magenta")
        case _:
            value = snapshot.result.classification if snapshot.result else ""
            classification = Text(value or MSG_NOT_AVAILABLE, style="bold")

    return Panel(
        Group(
            Text(LABEL_CLASSIFICATION, style="bold blue"),
            classification,
            Text(""),
            Text(LABEL_DESCRIPTION, style="bold blue"),
            _description(snapshot),
        ),
        title=PANEL_TITLE,
        border_style="blue",
    )


def render_error(message: str) -> Text:
    return Text(message, style="bold red")
