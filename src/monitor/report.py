"""
Report rendering for detected content changes.

Pure presentation: turns a diff into the plain-text and HTML bodies of a
notification.
"""

from html import escape

from .models import DiffRecord, DiffTag, Report

TEXT_HEADER = (
    "The web page at the following URL has changed:\n"
    "{url}\n"
    "Below is an overview of the changes:\n"
    "\n"
)

HTML_HEADER = (
    "<p>The web page at the following URL has changed:</p>\n"
    '<p><a href="{url}">{url}</a></p>\n'
    "<p>Below is an overview of the changes:</p>\n"
)


class ReportRenderer:
    """Renders diffs as plain text and as styled HTML."""

    TEXT_PREFIXES = {
        DiffTag.ADDED: "+",
        DiffTag.REMOVED: "-",
        DiffTag.UNCHANGED: "",
    }

    HTML_STYLES = {
        DiffTag.ADDED: "<p style='color: green'>{}</p>",
        DiffTag.REMOVED: "<p style='color: red'>{}</p>",
        DiffTag.UNCHANGED: "<p>{}</p>",
    }

    def render(self, diff: list[DiffRecord], url: str) -> Report:
        """Render both report forms."""
        return Report(
            url=url,
            text=self.render_text(diff, url),
            html=self.render_html(diff, url),
        )

    def render_text(self, diff: list[DiffRecord], url: str) -> str:
        """
        Render a diff as plain text.

        Added lines are prefixed with `+`, removed lines with `-`, unchanged
        lines are kept as they are.
        """
        parts = [TEXT_HEADER.format(url=url)]
        for record in diff:
            parts.append(f"{self.TEXT_PREFIXES[record.tag]}{record.line}\n")
        return "".join(parts)

    def render_html(self, diff: list[DiffRecord], url: str) -> str:
        """Render a diff as HTML, one paragraph per line."""
        parts = [HTML_HEADER.format(url=escape(url))]
        for record in diff:
            parts.append(self.HTML_STYLES[record.tag].format(escape(record.line)))
            parts.append("\n")
        return "".join(parts)
