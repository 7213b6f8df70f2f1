"""
Text and HTML pages served by the Pastel web interface
"""

import html

EXAMPLE_ID = "vxcRz"
EXAMPLE_KEY = "a7772362cf6e2c36"
EXAMPLE_EXT = "rs"

# Shared DOS shell retro theme
STYLE = """
            @import url('https://fonts.googleapis.com/css2?family=Press+Start+2P&display=swap');

            * {
                margin: 0;
                padding: 0;
                box-sizing: border-box;
            }

            body {
                font-family: 'Press Start 2P', cursive;
                background: #1a4d2e;
                min-height: 100vh;
                padding: 20px;
                color: #9eff6f;
                text-shadow: 2px 2px 0px rgba(0, 0, 0, 0.5);
                font-size: 14px;
            }

            .container {
                background: #2d5a3d;
                border: 8px solid #9eff6f;
                box-shadow: inset 0 0 0 4px #4a7c59;
                max-width: 1000px;
                margin: auto;
            }

            .header {
                background: #1a4d2e;
                padding: 20px;
                border-bottom: 6px solid #4a7c59;
                letter-spacing: 3px;
            }

            .content {
                padding: 20px;
                line-height: 1.6;
            }

            .content pre {
                font-family: 'Courier Prime', monospace;
                font-size: 13px;
                padding: 15px;
                overflow-x: auto;
                text-shadow: none;
            }

            textarea {
                width: 100%;
                min-height: 400px;
                padding: 12px 15px;
                border: 4px solid #9eff6f;
                font-family: 'Courier Prime', monospace;
                font-size: 14px;
                background: #2d5a3d;
                color: #9eff6f;
                box-shadow: inset 0 0 0 2px #4a7c59;
            }

            button {
                margin-top: 15px;
                padding: 12px 24px;
                border: 4px solid #9eff6f;
                font-family: 'Press Start 2P', cursive;
                cursor: pointer;
                text-transform: uppercase;
                letter-spacing: 2px;
                background: #1a4d2e;
                color: #9eff6f;
                box-shadow: inset 0 0 0 2px #4a7c59;
            }

            button:hover {
                background: #9eff6f;
                color: #1a4d2e;
            }

            #result {
                margin-top: 20px;
                word-break: break-all;
            }

            a {
                color: #9eff6f;
            }
"""


def get_usage_text(url: str, retention_days: float, max_paste_bytes: int) -> str:
    """Generate the plain-text usage page"""
    max_mb = max_paste_bytes / 1048576
    return f"""PASTEL(1)                        Pastel                        PASTEL(1)

NAME
    pastel - command line pastebin

USAGE
    Create a paste:
        <command> | curl --data-binary @- {url}/

    View a paste:
        curl {url}/{EXAMPLE_ID}

    View a paste with syntax highlighting (by file extension):
        curl {url}/{EXAMPLE_ID}/{EXAMPLE_EXT}

    Replace a paste:
        <command> | curl -X PUT --data-binary @- {url}/{EXAMPLE_ID}/{EXAMPLE_KEY}

    Delete a paste:
        curl -X DELETE {url}/{EXAMPLE_ID}/{EXAMPLE_KEY}

    Upload from a browser:
        {url}/webupload

NOTES
    The edit key is only shown once, when the paste is created.
    Pastes are deleted when they have not been modified for {retention_days:g} days.
    Pastes may not be larger than {max_mb:g} MB.
"""


def get_upload_page() -> str:
    """Generate the browser upload form; the paste is sent as a raw body"""
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>PASTEL - Upload</title>
        <style>{STYLE}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">PASTEL - New paste</div>
            <div class="content">
                <textarea id="pasteInput" placeholder="C:\\PASTEL>"></textarea>
                <button onclick="submitPaste()">Paste</button>
                <div id="result"></div>
            </div>
        </div>

        <script>
            async function submitPaste() {{
                const text = document.getElementById('pasteInput').value;
                const result = document.getElementById('result');
                if (!text) {{
                    result.textContent = 'ERROR: nothing to paste';
                    return;
                }}

                try {{
                    const response = await fetch('/', {{
                        method: 'POST',
                        headers: {{'Content-Type': 'text/plain; charset=utf-8'}},
                        body: text
                    }});
                    const data = await response.json();
                    if (response.ok) {{
                        result.innerHTML = '';
                        const view = document.createElement('a');
                        view.href = data.url;
                        view.textContent = 'View URL: ' + data.url;
                        const edit = document.createElement('div');
                        edit.textContent = 'Edit URL: ' + data.edit_url;
                        result.appendChild(view);
                        result.appendChild(edit);
                    }} else {{
                        result.textContent = 'ERROR: ' + data.detail;
                    }}
                }} catch (error) {{
                    console.error('Error:', error);
                    result.textContent = 'ERROR: upload failed';
                }}
            }}
        </script>
    </body>
    </html>
    """


def get_paste_page(paste_id: str, language: str, highlighted: str) -> str:
    """Wrap a highlighted HTML snippet in a page"""
    language = html.escape(language)
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>PASTEL - {paste_id}.{language}</title>
        <style>{STYLE}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">PASTEL - {paste_id}.{language}</div>
            <div class="content">
                {highlighted}
            </div>
        </div>
    </body>
    </html>
    """
