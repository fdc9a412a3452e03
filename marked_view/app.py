# ABOUTME: Demo Streamlit page for the marked directive: inline, localized file and static sources.
# ABOUTME: Run with `streamlit run marked_view/app.py`.

import logging
import os
from pathlib import Path

import streamlit as st

from marked_view.components.streamlit_marked import get_session_factory, render_marked
from marked_view.config import MarkedConfig, configure_logging

configure_logging()
logger = logging.getLogger("MarkedView")

DEMO_DATA_DIR = Path(__file__).parent / "data"
os.environ.setdefault("MARKED_DATA_PATH", f"{DEMO_DATA_DIR}/")


class AppConfig:
    PAGE_TITLE = "Marked View"
    PAGE_ICON = "📝"
    LAYOUT = "wide"
    DEFAULT_MARKDOWN = "*This* **is** [markdown](https://daringfireball.net/projects/markdown/)"


class MarkedDemoApp:
    """Demo page wiring the marked component to a few sources."""

    def __init__(self):
        self.setup_page_config()
        self.factory = get_session_factory()

    def setup_page_config(self):
        """Configure Streamlit page settings."""
        st.set_page_config(
            page_title=AppConfig.PAGE_TITLE,
            page_icon=AppConfig.PAGE_ICON,
            layout=AppConfig.LAYOUT,
            initial_sidebar_state="expanded"
        )

    def run(self):
        self.render_sidebar()
        st.title(f"{AppConfig.PAGE_ICON} {AppConfig.PAGE_TITLE}")

        inline_col, file_col = st.columns(2)
        with inline_col:
            self.render_inline_example()
        with file_col:
            self.render_file_example()

        st.markdown("---")
        render_marked(
            key="static",
            text="""
            ### Static content

            *It works!* This block is rendered once from static text.
            """,
        )

    def render_sidebar(self):
        with st.sidebar:
            st.markdown("## Settings")
            languages = list(MarkedConfig.LANGUAGE_INFO)
            current = self.factory.locale.get().language
            language = st.selectbox(
                "Language",
                options=languages,
                index=languages.index(current) if current in languages else 0,
                format_func=MarkedConfig.get_language_display_name,
            )
            self.factory.locale.set_language(language)
            self.factory.editor_state.show_editors = st.toggle(
                "Show editors", value=self.factory.editor_state.show_editors
            )

    def render_inline_example(self):
        st.subheader("Inline markdown")
        user_name = st.text_input("Your name", value="reader")
        markdown = st.text_area("Markdown", value=AppConfig.DEFAULT_MARKDOWN + "\n\nHello, {{ user_name }}!", height=150)
        render_marked(markdown, key="inline", compile=True, context={"user_name": user_name})

    def render_file_example(self):
        st.subheader("Localized file")
        render_marked(key="welcome", filename="welcome")


def main():
    app = MarkedDemoApp()
    app.run()


if __name__ == "__main__":
    main()
