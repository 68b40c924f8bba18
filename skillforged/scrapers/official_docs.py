"""Curated official documentation — a static table, no network.

official_docs(topic) matches the topic text against each entry's pattern
and returns every matching entry's links, in table order. Short
abbreviations (js, ts, ml, ai, go, ...) match as whole words only, so
"concepts" does not pull in TypeScript and "html" does not pull in
machine learning.
"""

import re
from dataclasses import dataclass

from skillforged.schemas import Resource


@dataclass(frozen=True)
class _DocsEntry:
    pattern: re.Pattern[str]
    links: tuple[tuple[str, str, str], ...]  # (title, url, source)
    exclude: re.Pattern[str] | None = None


def _words(*alternatives: str) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")\b")


def _anywhere(*alternatives: str) -> re.Pattern[str]:
    return re.compile("|".join(re.escape(a) for a in alternatives))


_DOCS_TABLE: tuple[_DocsEntry, ...] = (
    _DocsEntry(
        _anywhere("python"),
        (
            ("Python Official Documentation", "https://docs.python.org/3/", "Official Docs"),
            ("Python Package Index (PyPI)", "https://pypi.org/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        re.compile(r"javascript|\bjs\b"),
        (
            (
                "MDN JavaScript Guide",
                "https://developer.mozilla.org/en-US/docs/Web/JavaScript/Guide",
                "MDN",
            ),
            ("ECMAScript Standard Specification", "https://tc39.es/ecma262/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("react"),
        (
            ("React Documentation", "https://react.dev/learn", "Official Docs"),
            ("React API Reference", "https://react.dev/reference/react", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("node"),
        (
            ("Node.js Documentation", "https://nodejs.org/docs/latest/api/", "Official Docs"),
            ("Node.js API Reference", "https://nodejs.org/api/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        re.compile(r"typescript|\bts\b"),
        (
            (
                "TypeScript Handbook",
                "https://www.typescriptlang.org/docs/handbook/",
                "Official Docs",
            ),
            (
                "TypeScript API Reference",
                "https://www.typescriptlang.org/docs/handbook/declaration-files/introduction.html",
                "Official Docs",
            ),
        ),
    ),
    _DocsEntry(
        _anywhere("java"),
        (
            ("Java Official Documentation", "https://docs.oracle.com/en/java/", "Official Docs"),
            (
                "Java API Documentation",
                "https://docs.oracle.com/en/java/javase/21/docs/api/index.html",
                "Official Docs",
            ),
        ),
        exclude=_anywhere("javascript"),
    ),
    _DocsEntry(
        _anywhere("c++", "cpp"),
        (
            ("C++ Reference", "https://en.cppreference.com/w/", "CPP Reference"),
            ("ISO C++ Standard", "https://isocpp.org/std/the-standard", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("c#", "csharp"),
        (
            (
                "C# Official Documentation",
                "https://learn.microsoft.com/en-us/dotnet/csharp/",
                "Official Docs",
            ),
            (".NET Documentation", "https://learn.microsoft.com/en-us/dotnet/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("rust"),
        (
            ("The Rust Programming Language Book", "https://doc.rust-lang.org/book/", "Official Docs"),
            ("Rust API Documentation", "https://docs.rs/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _words("golang", "go"),
        (
            ("Go Official Documentation", "https://go.dev/doc/", "Official Docs"),
            ("Go Package Documentation", "https://pkg.go.dev/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("php"),
        (
            ("PHP Official Documentation", "https://www.php.net/docs.php", "Official Docs"),
            ("PHP Function Reference", "https://www.php.net/manual/en/funcref.php", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("sql", "database"),
        (
            ("SQL Tutorial - W3Schools", "https://www.w3schools.com/sql/", "W3Schools"),
            ("PostgreSQL Documentation", "https://www.postgresql.org/docs/", "Official Docs"),
            ("MySQL Documentation", "https://dev.mysql.com/doc/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("mongodb", "nosql"),
        (
            ("MongoDB Official Documentation", "https://docs.mongodb.com/", "Official Docs"),
            ("MongoDB University Free Courses", "https://university.mongodb.com/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("algorithm", "data structure"),
        (
            ("Visualgo - Algorithm Visualizations", "https://visualgo.net/", "Visualgo"),
            ("Big-O Cheatsheet", "https://www.bigocheatsheet.com/", "Reference"),
        ),
    ),
    _DocsEntry(
        re.compile(r"machine learning|\bml\b|\bai\b"),
        (
            (
                "Scikit-learn Documentation",
                "https://scikit-learn.org/stable/documentation.html",
                "Official Docs",
            ),
            ("TensorFlow Official Documentation", "https://www.tensorflow.org/learn", "Official Docs"),
            ("PyTorch Documentation", "https://pytorch.org/docs/stable/index.html", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("html", "css", "web"),
        (
            ("MDN Web Docs", "https://developer.mozilla.org/en-US/docs/Learn", "MDN"),
            ("HTML5 Standard Specification", "https://html.spec.whatwg.org/", "Official Docs"),
            ("CSS Official Specification", "https://www.w3.org/Style/CSS/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("docker", "container"),
        (
            ("Docker Official Documentation", "https://docs.docker.com/", "Official Docs"),
            ("Docker Hub", "https://hub.docker.com/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        re.compile(r"kubernetes|\bk8s\b"),
        (
            ("Kubernetes Official Documentation", "https://kubernetes.io/docs/", "Official Docs"),
            ("Kubernetes API Reference", "https://kubernetes.io/docs/reference/", "Official Docs"),
        ),
    ),
    _DocsEntry(
        re.compile(r"\baws\b|amazon"),
        (
            ("AWS Documentation", "https://docs.aws.amazon.com/", "Official Docs"),
            (
                "AWS Services Reference",
                "https://docs.aws.amazon.com/index.html?nc2=h_ql_doc_do",
                "Official Docs",
            ),
        ),
    ),
    _DocsEntry(
        re.compile(r"google cloud|\bgcp\b"),
        (
            ("Google Cloud Documentation", "https://cloud.google.com/docs", "Official Docs"),
            ("Google Cloud Services", "https://cloud.google.com/products", "Official Docs"),
        ),
    ),
    _DocsEntry(
        _anywhere("azure", "microsoft"),
        (
            ("Azure Documentation", "https://learn.microsoft.com/en-us/azure/", "Official Docs"),
            (
                "Azure Services Reference",
                "https://learn.microsoft.com/en-us/azure/?product=featured",
                "Official Docs",
            ),
        ),
    ),
    _DocsEntry(
        re.compile(r"network|\btcp\b|\bhttp\b|\bapis?\b"),
        (
            ("HTTP/HTTPS Specifications", "https://tools.ietf.org/html/rfc7230", "Official Docs"),
            ("TCP/IP Protocol Suite", "https://tools.ietf.org/html/rfc793", "Official Docs"),
            ("REST API Best Practices", "https://restfulapi.net/", "Reference"),
        ),
    ),
)


def official_docs(topic: str) -> list[Resource]:
    """Returns the curated documentation links that match a topic."""
    text = topic.lower()
    docs: list[Resource] = []
    for entry in _DOCS_TABLE:
        if not entry.pattern.search(text):
            continue
        if entry.exclude is not None and entry.exclude.search(text):
            continue
        docs.extend(
            Resource(title=title, url=url, type="documentation", source=source)
            for title, url, source in entry.links
        )
    return docs
