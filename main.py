#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
新闻客户端数据核心 - 命令行入口

加载配置和日志，构建依赖注入容器，刷新第一个已保存分类并打印结果。
传入关键词参数时改为执行一次关键词搜索。
"""

import os
import sys

from dotenv import load_dotenv
from PySide6.QtCore import QCoreApplication, QTimer

from news_client.config.settings import load_config
from news_client.containers import Container
from news_client.models import FeedListState, ListPhase
from news_client.ui.ui_state import Empty, Error, Loading, Success
from news_client.utils.logger import get_logger, setup_logging


def _print_feed_state(state: FeedListState):
    for article in state.articles:
        marker = " " if state.is_read(article.id) else "*"
        print(f"{marker} [{article.category}] {article.publish_time}  {article.title}")
    source = "缓存" if state.from_cache else "远程"
    print(f"共 {len(state.articles)} 条 (来源: {source}, 还有更多: {state.has_more})")
    if state.error:
        print(f"错误: {state.error}")


def main() -> int:
    project_root = os.path.dirname(os.path.abspath(__file__))
    dotenv_path = os.path.join(project_root, '.env')
    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path=dotenv_path)

    container = Container()
    load_config(container.config)

    setup_logging(log_level=container.config.logging.level())
    logger = get_logger("news_client.main")
    logger.info("应用程序启动")

    app = QCoreApplication(sys.argv)
    app.setOrganizationName(container.config.settings.organization())
    app.setApplicationName(container.config.settings.application())

    keyword = " ".join(sys.argv[1:]).strip()
    try:
        if keyword:
            search_vm = container.search_view_model()

            def on_search_state(state):
                if isinstance(state, Loading):
                    return
                if isinstance(state, Success):
                    for article in state.data:
                        print(f"[{article.category}] {article.publish_time}  {article.title}")
                elif isinstance(state, Empty):
                    print("没有找到相关新闻")
                elif isinstance(state, Error):
                    print(f"错误: {state.message}")
                app.quit()

            search_vm.state_changed.connect(on_search_state)
            search_vm.search_text(keyword)
        else:
            feed_vm = container.feed_list_view_model()
            category_vm = container.category_view_model()
            category_vm.categories_changed.connect(feed_vm.set_categories)

            def on_feed_state(state: FeedListState):
                if feed_vm.phase is ListPhase.IDLE:
                    _print_feed_state(state)
                    app.quit()

            feed_vm.state_changed.connect(on_feed_state)
            if feed_vm.phase is ListPhase.IDLE:
                # 没有已保存的分类: 列表为空，直接结束
                QTimer.singleShot(0, lambda: on_feed_state(feed_vm.state))

        return app.exec()
    finally:
        container.task_runner().wait_for_done(5000)
        container.news_cache().close()
        container.news_api_client().close()
        container.summary_client().close()
        logger.info("应用程序退出")


if __name__ == "__main__":
    sys.exit(main())
