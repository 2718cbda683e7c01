"""HTML page rendering for the catalog browser."""

from __future__ import annotations

import html
import json
from textwrap import dedent

from .config import Settings
from .ratings import BROWSE_GENRES, BROWSE_LANGUAGES, UK_RATINGS


BROWSE_TEMPLATE = dedent(
    """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>__APP_NAME__ · UK Age Filter</title>
    <style>
        :root {
            color-scheme: dark;
            font-family: 'Inter', 'Segoe UI', system-ui, -apple-system, sans-serif;
            --surface: #141414;
            --outline: #2b2b2b;
            --text-muted: #a6a6a6;
            --accent: #e50914;
            background: #000000;
            color: #f5f5f5;
        }
        * {
            box-sizing: border-box;
        }
        body {
            margin: 0;
            min-height: 100vh;
        }
        header {
            position: sticky;
            top: 0;
            z-index: 10;
            padding: 1rem 1.5rem;
            background: linear-gradient(90deg, #450a0a, #000000);
        }
        header h1 {
            margin: 0 0 1rem;
            color: var(--accent);
            font-size: 1.5rem;
        }
        .controls {
            display: grid;
            grid-template-columns: 2fr repeat(3, 1fr) auto;
            gap: 0.75rem;
        }
        input, select, button {
            padding: 0.6rem 0.75rem;
            border-radius: 8px;
            border: 1px solid var(--outline);
            background: var(--surface);
            color: inherit;
            font: inherit;
        }
        button {
            cursor: pointer;
        }
        main {
            padding: 1.5rem;
        }
        #summary {
            color: var(--text-muted);
            margin-bottom: 1rem;
        }
        .grid {
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(160px, 1fr));
            gap: 1rem;
        }
        .card {
            background: var(--surface);
            border-radius: 10px;
            overflow: hidden;
        }
        .card img {
            width: 100%;
            aspect-ratio: 2 / 3;
            object-fit: cover;
        }
        .card .meta {
            padding: 0.6rem;
            font-size: 0.85rem;
        }
        .card .meta strong {
            display: block;
            margin-bottom: 0.25rem;
        }
        .badge {
            display: inline-block;
            padding: 0.1rem 0.4rem;
            border-radius: 4px;
            background: var(--accent);
            font-size: 0.75rem;
            margin-right: 0.3rem;
        }
        @media (max-width: 720px) {
            .controls {
                grid-template-columns: 1fr;
            }
        }
    </style>
</head>
<body>
    <header>
        <h1>__APP_NAME__ · UK Age Filter</h1>
        <div class="controls">
            <input id="search" type="search" placeholder="Search movies and TV shows..." />
            <select id="rating"><option value="">UK Age Rating</option>__RATING_OPTIONS__</select>
            <select id="language"><option value="">Language</option>__LANGUAGE_OPTIONS__</select>
            <select id="genre"><option value="">Genre</option>__GENRE_OPTIONS__</select>
            <button id="clear" type="button">Clear All</button>
        </div>
    </header>
    <main>
        <div id="summary">Loading catalog…</div>
        <div id="results" class="grid"></div>
    </main>
    <script>
        (function() {
            const defaults = JSON.parse('__DEFAULTS_JSON__');
            const fields = {
                search: document.getElementById('search'),
                ratings: document.getElementById('rating'),
                languages: document.getElementById('language'),
                genres: document.getElementById('genre'),
            };
            const summary = document.getElementById('summary');
            const results = document.getElementById('results');
            let timer = null;

            function card(item) {
                const element = document.createElement('div');
                element.className = 'card';
                const image = document.createElement('img');
                image.src = item.imageUrl;
                image.alt = item.title;
                image.loading = 'lazy';
                const meta = document.createElement('div');
                meta.className = 'meta';
                const title = document.createElement('strong');
                title.textContent = item.title;
                const rating = document.createElement('span');
                rating.className = 'badge';
                rating.textContent = item.rating;
                const details = document.createElement('span');
                details.textContent = `${item.year} · ${item.genre} · ${item.language}`;
                meta.append(title, rating, details);
                element.append(image, meta);
                return element;
            }

            async function load() {
                const params = new URLSearchParams();
                for (const [key, field] of Object.entries(fields)) {
                    if (field.value.trim()) {
                        params.append(key, field.value.trim());
                    }
                }
                try {
                    const response = await fetch(`${defaults.filterUrl}?${params}`);
                    if (!response.ok) {
                        throw new Error(`HTTP ${response.status}`);
                    }
                    const items = await response.json();
                    results.replaceChildren(...items.map(card));
                    summary.textContent = items.length
                        ? `${items.length} titles`
                        : 'No titles match these filters yet.';
                } catch (err) {
                    summary.textContent = 'Unable to load the catalog. Please check your connection.';
                    console.error('Catalog request failed', err);
                }
            }

            function schedule() {
                clearTimeout(timer);
                timer = setTimeout(load, 250);
            }

            Object.values(fields).forEach((field) => field.addEventListener('input', schedule));
            document.getElementById('clear').addEventListener('click', () => {
                Object.values(fields).forEach((field) => { field.value = ''; });
                load();
            });
            load();
        })();
    </script>
</body>
</html>
    """
)


def _options(values: list[tuple[str, str]]) -> str:
    return "".join(
        f'<option value="{html.escape(value)}">{html.escape(label)}</option>'
        for value, label in values
    )


def render_browse_page(settings: Settings, *, filter_url: str = "/api/content/filter") -> str:
    """Return the full HTML for the `/` browsing page."""

    defaults = {"appName": settings.app_name, "filterUrl": filter_url}
    defaults_json = json.dumps(defaults).replace("</", "<\\/").replace("'", "\\'")

    page = BROWSE_TEMPLATE
    replacements = {
        "__APP_NAME__": html.escape(settings.app_name),
        "__RATING_OPTIONS__": _options(
            [(rating.code, rating.label) for rating in UK_RATINGS]
        ),
        "__LANGUAGE_OPTIONS__": _options(
            [(language, language) for language in BROWSE_LANGUAGES]
        ),
        "__GENRE_OPTIONS__": _options([(genre, genre) for genre in BROWSE_GENRES]),
        "__DEFAULTS_JSON__": defaults_json,
    }
    for placeholder, value in replacements.items():
        page = page.replace(placeholder, value)
    return page
