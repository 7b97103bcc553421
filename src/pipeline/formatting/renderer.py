import html


class HtmlRenderer:
    """
    Produces the only markup the solution panel accepts: bold spans and line
    breaks. Everything else goes through ``text`` and is escaped, so model or
    user supplied characters can never open a tag.
    """

    LINE_BREAK = "<br/>"

    def text(self, raw: str) -> str:
        # quotes are harmless outside attributes; keep them readable
        return html.escape(raw, quote=False)

    def bold(self, inner: str) -> str:
        return f"<b>{inner}</b>"

    def line_break(self) -> str:
        return self.LINE_BREAK
