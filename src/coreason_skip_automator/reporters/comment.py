from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
ABOUT_THIS_BOT = (
    "Instructions for interacting with me using PR comments are available in the repository documentation. "
    "If you have questions or suggestions related to my behavior, please file an issue against this bot's repository."
)


class CommentReporter:
    """Renders the replies posted back on a pull request when a command fails."""

    def __init__(self, template_dir: Optional[Path] = None, about: str = ABOUT_THIS_BOT) -> None:
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or DEFAULT_TEMPLATE_DIR)),
        )
        self.template = self.env.get_template("response.md.j2")
        self.about = about

    def format_response(self, body: str, comment_url: str, login: str, message: str) -> str:
        """
        Builds a reply mentioning the author and quoting the triggering comment.

        Args:
            body: The original comment body.
            comment_url: Permalink of the original comment.
            login: Author of the original comment.
            message: What went wrong.
        """
        return self.template.render(
            login=login,
            message=message,
            comment_url=comment_url,
            quoted="\n".join(">" + line for line in body.split("\n")),
            about=self.about,
        )
