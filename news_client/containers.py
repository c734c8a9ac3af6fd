"""依赖注入容器定义"""

from dependency_injector import containers, providers

from news_client.core.feed_repository import FeedRepository
from news_client.core.read_state import ReadStateSet
from news_client.core.task_runner import TaskRunner
from news_client.remote.news_api_client import NewsApiClient
from news_client.remote.summary_client import SummaryClient
from news_client.storage.news_cache import NewsCache
from news_client.storage.user_state_store import UserStateStore
from news_client.ui.viewmodels.category_viewmodel import CategoryManagementViewModel
from news_client.ui.viewmodels.favorites_viewmodel import FavoritesViewModel
from news_client.ui.viewmodels.feed_list_viewmodel import FeedListViewModel
from news_client.ui.viewmodels.history_viewmodel import HistoryViewModel
from news_client.ui.viewmodels.news_detail_viewmodel import NewsDetailViewModel
from news_client.ui.viewmodels.search_viewmodel import SearchViewModel


class Container(containers.DeclarativeContainer):
    """应用程序依赖注入容器

    配置由 news_client.config.settings.load_config 加载。
    QObject 派生的服务需要在 QCoreApplication 创建之后才能实例化。
    """

    # --- 配置 ---
    config = providers.Configuration()

    # --- 外部协作者 ---

    news_api_client = providers.Singleton(
        NewsApiClient,
        base_url=config.api.base_url,
        endpoint=config.api.endpoint,
        timeout=config.api.timeout_seconds,
        search_page_size=config.feed.search_page_size,
    )

    summary_client = providers.Singleton(
        SummaryClient,
        api_url=config.summary.api_url,
        model=config.summary.model,
        max_tokens=config.summary.max_tokens,
        timeout=config.summary.timeout_seconds,
    )

    news_cache = providers.Singleton(
        NewsCache,
        data_dir=config.paths.data_dir,
        db_name=config.paths.db_name,
    )

    user_state_store = providers.Singleton(
        UserStateStore,
        organization=config.settings.organization,
        application=config.settings.application,
    )

    # --- 核心 ---

    read_state = providers.Singleton(ReadStateSet, store=user_state_store)

    feed_repository = providers.Singleton(
        FeedRepository,
        client=news_api_client,
        cache=news_cache,
        start_date=config.feed.start_date,
        end_date=config.feed.end_date,
        summary_client=summary_client,
    )

    task_runner = providers.Singleton(TaskRunner)

    # --- ViewModels ---

    feed_list_view_model = providers.Singleton(
        FeedListViewModel,
        repository=feed_repository,
        user_state_store=user_state_store,
        task_runner=task_runner,
        page_size=config.feed.page_size,
        read_state=read_state,
    )

    search_view_model = providers.Factory(
        SearchViewModel,
        repository=feed_repository,
        task_runner=task_runner,
    )

    news_detail_view_model = providers.Factory(
        NewsDetailViewModel,
        repository=feed_repository,
        task_runner=task_runner,
        feed_list_viewmodel=feed_list_view_model,
    )

    history_view_model = providers.Factory(
        HistoryViewModel,
        repository=feed_repository,
        task_runner=task_runner,
    )

    favorites_view_model = providers.Factory(
        FavoritesViewModel,
        repository=feed_repository,
        task_runner=task_runner,
    )

    category_view_model = providers.Singleton(
        CategoryManagementViewModel,
        user_state_store=user_state_store,
    )
