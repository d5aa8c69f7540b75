"""Tests for page context extraction"""

import pytest

from smart_omnibox.context_analyzer import ContextAnalyzer


ARTICLE_HTML = """
<html>
  <head><title>Closures explained</title></head>
  <body>
    <nav>Home | Blog</nav>
    <article>
      <h1>Closures</h1>
      <p>A closure captures its environment.</p>
      <h2>  </h2>
      <h2>Examples</h2>
      <a href="/related">Related</a>
      <a href="https://other.example.org/page">Other</a>
      <a href="mailto:me@example.com">Mail</a>
      <a href="javascript:void(0)">Noop</a>
    </article>
  </body>
</html>
"""

NO_CONTAINER_HTML = """
<html>
  <body>
    <header>Site header</header>
    <div class="sidebar">Sidebar links</div>
    <div>Body text that matters</div>
    <footer>Copyright</footer>
  </body>
</html>
"""


@pytest.fixture
def analyzer():
    return ContextAnalyzer()


def test_no_snapshot_returns_empty_context(analyzer):
    context = analyzer.analyze_page(None)
    
    assert context.url == ""
    assert context.title == ""
    assert context.content == ""
    assert context.headings == []
    assert context.links == []


def test_article_container_is_preferred(analyzer):
    context = analyzer.analyze_page(ARTICLE_HTML, url="https://blog.example.com/posts/1")
    
    assert context.title == "Closures explained"
    assert "A closure captures its environment." in context.content
    assert "Home | Blog" not in context.content


def test_headings_trimmed_and_empty_dropped(analyzer):
    context = analyzer.analyze_page(ARTICLE_HTML)
    
    assert context.headings == ["Closures", "Examples"]


def test_links_resolved_and_filtered(analyzer):
    context = analyzer.analyze_page(ARTICLE_HTML, url="https://blog.example.com/posts/1")
    
    assert context.links == [
        "https://blog.example.com/related",
        "https://other.example.org/page",
    ]


def test_fallback_strips_page_chrome(analyzer):
    context = analyzer.analyze_page(NO_CONTAINER_HTML)
    
    assert context.content == "Body text that matters"


def test_explicit_title_wins(analyzer):
    context = analyzer.analyze_page(ARTICLE_HTML, title="From the extension")
    
    assert context.title == "From the extension"


def test_limits(analyzer):
    headings = "".join(f"<h3>Heading {i}</h3>" for i in range(30))
    links = "".join(f'<a href="https://example.com/{i}">{i}</a>' for i in range(80))
    body = "x" * 6000
    html = f"<html><body><main>{body}</main>{headings}{links}</body></html>"
    
    context = analyzer.analyze_page(html)
    
    assert len(context.content) == 5000
    assert len(context.headings) == 20
    assert context.headings[0] == "Heading 0"
    assert len(context.links) == 50
    assert context.links[-1] == "https://example.com/49"
