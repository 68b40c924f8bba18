"""Curated related links for a module — pure, deterministic, no I/O.

Every module gets the community and tooling basics, then keyword-matched
extras for its subject, then the general practice platforms and
documentation hubs. Matching is case-insensitive substring search on the
module title.
"""

from skillforged.schemas import RelatedLink

_Link = tuple[str, str, str]  # (title, url, category)

_LEADING: tuple[_Link, ...] = (
    ("Stack Overflow Community", "https://stackoverflow.com/", "Community"),
    ("Reddit r/learnprogramming", "https://www.reddit.com/r/learnprogramming/", "Community"),
    ("Dev.to Community", "https://dev.to/", "Community"),
    ("Visual Studio Code", "https://code.visualstudio.com/", "Tools"),
    ("GitHub - Version Control", "https://github.com/", "Tools"),
)

_BY_KEYWORD: tuple[tuple[tuple[str, ...], tuple[_Link, ...]], ...] = (
    (
        ("javascript", "web", "react", "typescript"),
        (
            ("npm - JavaScript Package Manager", "https://www.npmjs.com/", "Tools"),
            ("Chrome DevTools Guide", "https://developer.chrome.com/docs/devtools/", "Tools"),
        ),
    ),
    (
        ("python",),
        (
            ("Python Package Index (PyPI)", "https://pypi.org/", "Tools"),
            ("Anaconda - Python Distribution", "https://www.anaconda.com/", "Tools"),
        ),
    ),
    (
        ("test", "jest"),
        (
            ("Jest Testing Framework", "https://jestjs.io/", "Testing"),
            ("Mocha Test Framework", "https://mochajs.org/", "Testing"),
        ),
    ),
    (
        ("html", "css", "web", "react"),
        (
            ("Can I Use - Browser Compatibility", "https://caniuse.com/", "Reference"),
            ("MDN Web Docs", "https://developer.mozilla.org/", "Reference"),
            ("CSS Reference Guide", "https://cssreference.io/", "Reference"),
        ),
    ),
    (
        ("database", "sql", "mongodb", "postgres"),
        (
            ("DB Fiddle - Online SQL Editor", "https://www.db-fiddle.com/", "Tools"),
            ("MongoDB Atlas", "https://www.mongodb.com/cloud/atlas", "Tools"),
        ),
    ),
    (
        ("docker", "kubernetes", "aws", "cloud"),
        (
            ("Docker Hub", "https://hub.docker.com/", "Cloud"),
            ("AWS Free Tier", "https://aws.amazon.com/free/", "Cloud"),
            ("Google Cloud Free Tier", "https://cloud.google.com/free", "Cloud"),
        ),
    ),
    (
        ("machine learning", "ai", "tensorflow", "pytorch"),
        (
            ("Google Colab - Free ML Notebooks", "https://colab.research.google.com/", "Tools"),
            ("Kaggle - ML Competitions", "https://www.kaggle.com/", "Community"),
        ),
    ),
)

_TRAILING: tuple[_Link, ...] = (
    ("Codecademy - Interactive Learning", "https://www.codecademy.com/", "Learning Platform"),
    ("Exercism - Code Practice", "https://exercism.org/", "Practice"),
    ("LeetCode - Interview Prep", "https://leetcode.com/", "Practice"),
    ("HackerRank - Coding Challenges", "https://www.hackerrank.com/", "Practice"),
    ("DevDocs - Offline Documentation", "https://devdocs.io/", "Reference"),
    ("Awesome Lists - Curated Resources", "https://github.com/sindresorhus/awesome", "Reference"),
)


def related_links(module_title: str) -> list[RelatedLink]:
    """Returns the curated related links for a module title."""
    title = module_title.lower()
    selected: list[_Link] = list(_LEADING)
    for keywords, links in _BY_KEYWORD:
        if any(keyword in title for keyword in keywords):
            selected.extend(links)
    selected.extend(_TRAILING)
    return [
        RelatedLink(title=link_title, url=url, category=category)
        for link_title, url, category in selected
    ]
