#!/usr/bin/env python3
"""Compile email templates: inline CSS, minify HTML.

Sources live in cocoon/templates/emails/*.j2; output goes to the compiled/
subdirectory that cocoon.core.email renders at runtime.

    make compile-emails            # rewrite compiled templates
    make check-emails              # exit 1 if compiled output is stale
"""

import argparse
import sys

import css_inline
import minify_html

from cocoon.core.constants import CompiledEmailTemplatesDir, JinjaEmailTemplatesEnv

# Template name -> Jinja2 variables it uses
TEMPLATES = {
    "email-verification.j2": ["verification_url", "expires_minutes"],
    "subscription-confirmation.j2": ["shop_url"],
}

# Placeholders are rendered as URLs so the minifier keeps attribute quotes.
MARKER_URL_PREFIX = "https://jinja-placeholder.local/var/"


def compile_template(template_name: str, variables: list[str]) -> str:
    context = {var: f"{MARKER_URL_PREFIX}{var}" for var in variables}
    html_content = JinjaEmailTemplatesEnv.get_template(template_name).render(**context)
    html_content = css_inline.inline(html_content)
    html_content = minify_html.minify(html_content, minify_css=True)

    for var in variables:
        marker = f"{MARKER_URL_PREFIX}{var}"
        jinja_var = f"{{{{ {var} }}}}"
        # The minifier may drop quotes around attribute values.
        html_content = html_content.replace(f"={marker}>", f'="{jinja_var}">')
        html_content = html_content.replace(f"={marker} ", f'="{jinja_var}" ')
        html_content = html_content.replace(marker, jinja_var)
    return html_content


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--check",
        action="store_true",
        help="do not write; fail if any compiled template is out of date",
    )
    args = parser.parse_args(argv)

    CompiledEmailTemplatesDir.mkdir(exist_ok=True)
    stale = []
    for template_name, variables in TEMPLATES.items():
        output_path = CompiledEmailTemplatesDir / template_name.replace(".j2", ".html")
        compiled = compile_template(template_name, variables)
        current = (
            output_path.read_text(encoding="utf-8") if output_path.exists() else None
        )
        if compiled == current:
            continue
        if args.check:
            stale.append(output_path.name)
        else:
            output_path.write_text(compiled, encoding="utf-8")
            print(f"compiled {template_name} -> {output_path.name}")

    if stale:
        print(f"stale compiled templates: {', '.join(stale)}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
