"""railsforge reporter module -- end-of-run status lines and next steps."""

from .summary import print_summary, render_next_steps, summary_lines

__all__ = ["print_summary", "render_next_steps", "summary_lines"]
