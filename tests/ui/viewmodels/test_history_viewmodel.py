import pytest

from news_client.exceptions import PersistenceFailure
from news_client.ui.ui_state import Empty, Error, Loading, Success
from news_client.ui.viewmodels.history_viewmodel import HistoryViewModel


@pytest.fixture
def vm(qtbot, mock_repository, manual_runner):
    return HistoryViewModel(repository=mock_repository, task_runner=manual_runner, page_size=10)


def test_load_recent_articles(vm, mock_repository, manual_runner, sample_articles):
    mock_repository.get_recent.return_value = sample_articles

    vm.load()
    assert vm.state == Loading()
    manual_runner.run_all()

    mock_repository.get_recent.assert_called_once_with(1, 10)
    assert vm.state == Success(sample_articles)


def test_load_second_page(vm, mock_repository, manual_runner):
    mock_repository.get_recent.return_value = []

    vm.load(page=2)
    manual_runner.run_all()

    mock_repository.get_recent.assert_called_once_with(2, 10)
    assert vm.page == 2
    assert vm.state == Empty()


def test_load_failure(vm, mock_repository, manual_runner):
    mock_repository.get_recent.side_effect = PersistenceFailure("corrupt")

    vm.load()
    manual_runner.run_all()

    assert isinstance(vm.state, Error)


def test_clear_history_reloads(vm, mock_repository, manual_runner):
    mock_repository.clear_history.return_value = 4
    mock_repository.get_recent.return_value = []

    vm.clear_history()
    manual_runner.run_all()

    mock_repository.clear_history.assert_called_once()
    mock_repository.get_recent.assert_called_once_with(1, 10)
    assert vm.state == Empty()


def test_clear_history_failure_emits_error(vm, mock_repository, manual_runner, qtbot):
    mock_repository.clear_history.side_effect = PersistenceFailure("read-only")

    vm.clear_history()
    with qtbot.waitSignal(vm.error_occurred, timeout=1000):
        manual_runner.run_all()

    mock_repository.get_recent.assert_not_called()


def test_delete_item_reloads_current_page(vm, mock_repository, manual_runner, sample_articles):
    mock_repository.get_recent.return_value = sample_articles
    vm.load(page=2)
    manual_runner.run_all()

    mock_repository.delete_history_item.return_value = True
    mock_repository.get_recent.return_value = sample_articles[1:]
    vm.delete_item("a1")
    manual_runner.run_all()

    mock_repository.delete_history_item.assert_called_once_with("a1")
    assert mock_repository.get_recent.call_args.args == (2, 10)
    assert vm.state == Success(sample_articles[1:])


def test_delete_item_failure_emits_error(vm, mock_repository, manual_runner, qtbot):
    mock_repository.delete_history_item.side_effect = PersistenceFailure("locked")

    vm.delete_item("a1")
    with qtbot.waitSignal(vm.error_occurred, timeout=1000):
        manual_runner.run_all()

    mock_repository.get_recent.assert_not_called()
