"""
Operator CLI for the busk-cats subscription service.

Talks to a running service over HTTP with the admin bearer secret, plus two
local helpers that never touch the network (draft, form).

Environment (or --env-file):
    PUBLIC_URL    Base URL of the service, e.g. https://subs.example.com
    ADMIN_SECRET  Shared admin secret
"""

import html
import json
import os
import sys

import click
import requests
from dotenv import load_dotenv

# Broadcasts send synchronously, so /send can take a while on large lists
SEND_TIMEOUT = 300
REQUEST_TIMEOUT = 30


class AdminClient:
    """Minimal HTTP client for the admin endpoints"""

    def __init__(self, base_url, admin_secret):
        self.base_url = base_url.rstrip('/')
        self.admin_secret = admin_secret

    def call(self, method, path, body=None, params=None, timeout=REQUEST_TIMEOUT):
        resp = requests.request(
            method,
            f"{self.base_url}{path}",
            headers={
                'Content-Type': 'application/json',
                'Authorization': f'Bearer {self.admin_secret}',
            },
            json=body,
            params=params,
            timeout=timeout,
        )
        try:
            data = resp.json()
        except ValueError:
            data = resp.text
        if not resp.ok:
            detail = data if isinstance(data, str) else json.dumps(data)
            click.echo(f"Error {resp.status_code}: {detail}", err=True)
            sys.exit(1)
        return data


def _client():
    base_url = os.getenv('PUBLIC_URL')
    admin_secret = os.getenv('ADMIN_SECRET')
    if not base_url or not admin_secret:
        raise click.ClickException(
            "Missing PUBLIC_URL or ADMIN_SECRET in environment. "
            "Set them via --env-file or export them."
        )
    return AdminClient(base_url, admin_secret)


@click.group()
@click.option('--env-file', type=click.Path(exists=True, dir_okay=False),
              help='Path to a .env file to load')
def cli(env_file):
    """Admin CLI for the busk-cats email subscription service"""
    if env_file:
        load_dotenv(env_file, override=True)


@cli.command()
@click.option('--list', 'list_name', required=True, help='Mailing list name')
@click.option('--subject', required=True, help='Email subject')
@click.option('--html', 'html_body', help='HTML body as a string')
@click.option('--html-file', type=click.Path(exists=True, dir_okay=False),
              help='Path to an HTML file to use as the body')
def send(list_name, subject, html_body, html_file):
    """Send an email to all confirmed subscribers on a list"""
    if not html_body and html_file:
        with open(html_file, 'r', encoding='utf-8') as f:
            html_body = f.read()
    if not html_body:
        raise click.ClickException('Provide --html or --html-file')

    result = _client().call('POST', '/send', {
        'subject': subject,
        'html': html_body,
        'list': list_name,
    }, timeout=SEND_TIMEOUT)
    click.echo(json.dumps(result))


@cli.command('list')
@click.option('--list', 'list_name', help='Filter by mailing list name')
def list_subscribers(list_name):
    """List subscribers (optionally filtered by mailing list)"""
    params = {'list': list_name} if list_name else None
    results = _client().call('GET', '/admin/list', params=params)
    if not results:
        click.echo('No subscribers.')
        return

    click.echo(f"{'EMAIL':<35} {'LIST':<20} {'CONFIRMED':<10} CREATED AT")
    click.echo('-' * 85)
    for s in results:
        confirmed = 'yes' if s.get('confirmed') else 'no'
        click.echo(f"{s['email']:<35} {s['list']:<20} {confirmed:<10} {s['created_at']}")


@cli.command()
@click.option('--email', required=True, help='Email to add')
@click.option('--list', 'list_name', required=True, help='Mailing list name')
def add(email, list_name):
    """Add a subscriber directly (skips confirmation email)"""
    result = _client().call('POST', '/admin/add', {'email': email, 'list': list_name})
    click.echo(json.dumps(result))


@cli.command()
@click.option('--email', required=True, help='Email to delete')
@click.option('--list', 'list_name', help='Only delete from this list (omit to delete from all lists)')
def delete(email, list_name):
    """Delete a subscriber by email (optionally from a specific list)"""
    body = {'email': email}
    if list_name:
        body['list'] = list_name
    result = _client().call('POST', '/admin/delete', body)
    click.echo(json.dumps(result))


# ===================
# LOCAL HELPERS
# ===================

DRAFT_TEMPLATE = """<h1>{title}</h1>
<p>Write the opening paragraph here.</p>
<p>
  <a href="{link}">Read the full post</a>
</p>
"""

FORM_TEMPLATE = """<form class="buskcats-subscribe" data-endpoint="{endpoint}" data-list="{list_name}">
  <input type="email" name="email" placeholder="{placeholder}" required>
  <button type="submit">{button_text}</button>
  <p class="buskcats-status" role="status"></p>
</form>
<script>
document.querySelectorAll("form.buskcats-subscribe").forEach(function (form) {{
  form.addEventListener("submit", async function (event) {{
    event.preventDefault();
    var status = form.querySelector(".buskcats-status");
    var res = await fetch(form.dataset.endpoint, {{
      method: "POST",
      headers: {{ "Content-Type": "application/json" }},
      body: JSON.stringify({{ email: form.email.value, list: form.dataset.list }})
    }});
    if (res.ok) {{
      status.textContent = "Check your inbox to confirm your subscription.";
      form.reset();
    }} else if (res.status === 409) {{
      status.textContent = "You're already subscribed.";
    }} else {{
      var data = await res.json().catch(function () {{ return {{}}; }});
      status.textContent = data.error || "Something went wrong, please try again.";
    }}
  }});
}});
</script>
"""


@cli.command()
@click.option('--subject', required=True, help='Heading for the draft email')
@click.option('--link', default='https://example.com/', show_default=True,
              help='Link to the full post')
@click.option('--output', type=click.Path(dir_okay=False),
              help='Write the draft to this file instead of stdout')
@click.option('--force', is_flag=True, help='Overwrite an existing output file')
def draft(subject, link, output, force):
    """Write an HTML email body skeleton to edit before sending"""
    body = DRAFT_TEMPLATE.format(
        title=html.escape(subject),
        link=html.escape(link, quote=True),
    )
    if not output:
        click.echo(body, nl=False)
        return
    if os.path.exists(output) and not force:
        raise click.ClickException(f"{output} already exists (use --force to overwrite)")
    with open(output, 'w', encoding='utf-8') as f:
        f.write(body)
    click.echo(f"Draft written to {output}")


@cli.command()
@click.option('--list', 'list_name', required=True, help='Mailing list the form subscribes to')
@click.option('--url', 'base_url', help='Service base URL (defaults to PUBLIC_URL)')
@click.option('--button-text', default='Subscribe', show_default=True)
@click.option('--placeholder', default='you@example.com', show_default=True)
def form(list_name, base_url, button_text, placeholder):
    """Print an embeddable subscribe form snippet"""
    base_url = base_url or os.getenv('PUBLIC_URL')
    if not base_url:
        raise click.ClickException('Provide --url or set PUBLIC_URL')
    click.echo(FORM_TEMPLATE.format(
        endpoint=html.escape(f"{base_url.rstrip('/')}/subscribe", quote=True),
        list_name=html.escape(list_name, quote=True),
        button_text=html.escape(button_text),
        placeholder=html.escape(placeholder, quote=True),
    ), nl=False)


if __name__ == '__main__':
    cli()
