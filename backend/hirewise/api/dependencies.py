from fastapi import Request

from hirewise.container import ServiceContainer
from hirewise.services.parsing_tracker import ParsingJobTracker
from hirewise.services.search_summary import SearchSummaryOrchestrator


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_tracker(request: Request) -> ParsingJobTracker:
    return get_container(request).tracker


def get_search_summary(request: Request) -> SearchSummaryOrchestrator:
    return get_container(request).search_summary
