import pytest

from news_client.models import (CombinedQuery, DateQuery, DateRange, KeywordQuery, NewsCategory,
                                PaginatedResult, SearchMode)
from news_client.ui.ui_state import Empty, Error, Loading, Success
from news_client.ui.viewmodels.search_viewmodel import SearchViewModel

FEB_2025 = DateRange("2025-02-01", "2025-02-28")


@pytest.fixture
def vm(qtbot, mock_repository, manual_runner):
    return SearchViewModel(repository=mock_repository, task_runner=manual_runner)


def test_initial_state_is_empty(vm):
    assert vm.state == Empty()
    assert vm.mode is SearchMode.NO_QUERY
    assert vm.query is None


def test_keyword_search_with_no_results_is_empty_not_error(vm, mock_repository, manual_runner):
    mock_repository.search.return_value = PaginatedResult.from_search([], total=0)
    states = []
    vm.state_changed.connect(states.append)

    vm.search(KeywordQuery("economy"))
    manual_runner.run_all()

    mock_repository.search.assert_called_once_with("economy", None)
    assert states == [Loading(), Empty()]
    assert vm.mode is SearchMode.KEYWORD_ONLY


def test_keyword_search_success(vm, mock_repository, manual_runner, sample_articles):
    mock_repository.search.return_value = PaginatedResult.from_search(sample_articles, total=3)

    vm.search(KeywordQuery("科技", NewsCategory.TECHNOLOGY))
    manual_runner.run_all()

    assert vm.state == Success(sample_articles)
    mock_repository.search.assert_called_once_with("科技", NewsCategory.TECHNOLOGY)


def test_date_search_uses_date_range(vm, mock_repository, manual_runner, sample_articles):
    mock_repository.search_by_date_range.return_value = PaginatedResult.from_search(sample_articles, total=3)

    vm.search(DateQuery(FEB_2025))
    manual_runner.run_all()

    mock_repository.search_by_date_range.assert_called_once_with(FEB_2025, None)
    assert vm.mode is SearchMode.DATE_ONLY
    assert isinstance(vm.state, Success)


def test_combined_search(vm, mock_repository, manual_runner, sample_articles):
    mock_repository.search_combined.return_value = PaginatedResult.from_search(sample_articles[:1], total=1)

    vm.search(CombinedQuery("economy", FEB_2025, NewsCategory.FINANCE))
    manual_runner.run_all()

    mock_repository.search_combined.assert_called_once_with("economy", FEB_2025, NewsCategory.FINANCE)
    assert vm.mode is SearchMode.COMBINED
    assert vm.state == Success(sample_articles[:1])


def test_transport_failure_becomes_error(vm, mock_repository, manual_runner):
    mock_repository.search.return_value = PaginatedResult.empty(error="搜索失败: 网络不可用")

    vm.search(KeywordQuery("economy"))
    manual_runner.run_all()

    assert vm.state == Error("搜索失败: 网络不可用")


def test_unexpected_exception_becomes_error(vm, mock_repository, manual_runner):
    mock_repository.search.side_effect = RuntimeError("boom")

    vm.search(KeywordQuery("economy"))
    manual_runner.run_all()

    assert isinstance(vm.state, Error)
    assert "boom" in vm.state.message


def test_every_search_is_a_fresh_call(vm, mock_repository, manual_runner):
    mock_repository.search.return_value = PaginatedResult.from_search([], total=0)

    vm.search(KeywordQuery("economy"))
    manual_runner.run_all()
    vm.search(KeywordQuery("economy"))
    manual_runner.run_all()

    assert mock_repository.search.call_count == 2


def test_stale_search_response_is_discarded(vm, mock_repository, manual_runner, article_factory):
    def search(keyword, category):
        return PaginatedResult.from_search([article_factory(keyword)], total=1)
    mock_repository.search.side_effect = search

    vm.search(KeywordQuery("first"))
    vm.search(KeywordQuery("second"))

    manual_runner.run_next()
    assert vm.state == Loading()

    manual_runner.run_next()
    assert [a.id for a in vm.state.data] == ["second"]


def test_clear_drops_in_flight_result(vm, mock_repository, manual_runner, sample_articles):
    mock_repository.search.return_value = PaginatedResult.from_search(sample_articles, total=3)

    vm.search(KeywordQuery("economy"))
    vm.clear()
    manual_runner.run_all()

    assert vm.state == Empty()
    assert vm.mode is SearchMode.NO_QUERY


def test_search_text_builds_query(vm, mock_repository, manual_runner):
    mock_repository.search_combined.return_value = PaginatedResult.from_search([], total=0)

    vm.search_text("  economy ", FEB_2025)

    assert vm.query == CombinedQuery("economy", FEB_2025)
    manual_runner.run_all()
    mock_repository.search_combined.assert_called_once()


def test_search_text_without_filters_clears(vm, manual_runner):
    vm.search_text("   ", None)

    assert manual_runner.pending_count == 0
    assert vm.state == Empty()
    assert vm.mode is SearchMode.NO_QUERY
