"""Page context extraction from DOM snapshots"""

import copy
from datetime import datetime
from typing import List, Optional
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup

from .models import MAX_CONTENT_LENGTH, PageContext

logger = structlog.get_logger(__name__)

CONTENT_SELECTORS = (
    "article",
    "main",
    '[role="main"]',
    ".content",
    ".post",
    ".article-body",
    ".entry-content",
    "#content",
    ".main-content",
)

EXCLUDE_SELECTORS = (
    "nav", "header", "footer", "aside",
    ".nav", ".header", ".footer", ".sidebar",
    ".navigation", ".menu", ".ads", ".advertisement",
)


class ContextAnalyzer:
    """Builds a PageContext from the HTML of the page being viewed"""
    
    def analyze_page(
        self,
        html: Optional[str] = None,
        url: str = "",
        title: Optional[str] = None
    ) -> PageContext:
        """Analyse a DOM snapshot, empty context when there is none"""
        if html is None:
            return PageContext(url="", title="", content="", headings=[], links=[])
        
        soup = BeautifulSoup(html, "html.parser")
        if title is None:
            title = soup.title.get_text().strip() if soup.title else ""
        
        context = PageContext(
            url=url,
            title=title,
            content=self.extract_main_content(soup),
            headings=self.extract_headings(soup),
            links=self.extract_links(soup, url),
            timestamp=datetime.utcnow()
        )
        logger.debug(
            "Page analysed",
            url=url,
            content_length=len(context.content),
            headings=len(context.headings),
            links=len(context.links)
        )
        return context
    
    def extract_main_content(self, soup: BeautifulSoup) -> str:
        """Text of the main content container, or of the body minus page chrome"""
        for selector in CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                text = element.get_text()
                if text:
                    return text[:MAX_CONTENT_LENGTH].strip()
        
        body = copy.copy(soup.body) if soup.body is not None else copy.copy(soup)
        for selector in EXCLUDE_SELECTORS:
            for element in body.select(selector):
                element.decompose()
        
        return body.get_text()[:MAX_CONTENT_LENGTH].strip()
    
    def extract_headings(self, soup: BeautifulSoup) -> List[str]:
        """h1-h6 texts in document order, PageContext caps the count"""
        headings = []
        for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
            text = heading.get_text().strip()
            if text:
                headings.append(text)
        return headings
    
    def extract_links(self, soup: BeautifulSoup, base_url: str = "") -> List[str]:
        """Resolved anchor targets, PageContext keeps the http(s) ones"""
        links = []
        for anchor in soup.find_all("a", href=True):
            try:
                links.append(urljoin(base_url, anchor["href"]) if base_url else anchor["href"])
            except ValueError:
                continue
        return links
