# core/renderer.py
import os
from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'templates'))


class TemplateRenderer:
    def __init__(self, template_dir: str = TEMPLATE_DIR):
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True
        )

    def render(self, tpl_name: str, out_path: str, newline: str = None, **ctx):
        tpl = self.env.get_template(tpl_name)
        rendered = tpl.render(**ctx)
        with open(out_path, 'w', newline=newline) as f:
            f.write(rendered)

    def render_launcher(self, out_path: str, shortcut):
        """
        Render launcher.cmd.j2 -> out_path (CRLF, cmd.exe expects it)
        """
        self.render(
            "launcher.cmd.j2",
            out_path,
            newline           = "\r\n",
            target_path       = shortcut.target_path,
            working_directory = shortcut.working_directory,
            arguments         = shortcut.arguments,
            description       = shortcut.description
        )
