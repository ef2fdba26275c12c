"""
Chat Proxy Cloud Function

Relays chat requests from the photo map site to the Gemini API so the API
key never reaches the browser.

Responsibilities:
- Accept a generateContent JSON body from the site
- Forward it verbatim to Gemini with the server-held key
- Return Gemini's response, or a JSON error with the upstream status

Does NOT:
- Inspect or rewrite the conversation
- Retry or rate limit (the site handles user feedback)
"""

import functions_framework
import requests
import json
import os

# Configuration
GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')  # Required: set via Cloud Function environment variable
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-1.5-flash')
GEMINI_ENDPOINT = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'
REQUEST_TIMEOUT = 60


def json_response(payload: dict, status: int, headers: dict) -> tuple:
    """Build a (body, status, headers) tuple with a JSON body."""
    return (json.dumps(payload, ensure_ascii=False), status, headers)


def forward_to_gemini(request_data, api_key: str, model: str = None) -> requests.Response:
    """POST request_data to the generateContent endpoint unchanged."""
    url = GEMINI_ENDPOINT.format(model=model or GEMINI_MODEL)
    return requests.post(
        url,
        params={'key': api_key},
        json=request_data,
        headers={'Content-Type': 'application/json'},
        timeout=REQUEST_TIMEOUT
    )


@functions_framework.http
def chat(request):
    """
    Main Cloud Function entry point.

    Expected JSON input is a Gemini generateContent body, e.g.:
    {
        "contents": [
            {"role": "user", "parts": [{"text": "おすすめのスポットは？"}]}
        ]
    }
    """
    # Handle CORS
    if request.method == 'OPTIONS':
        headers = {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'POST',
            'Access-Control-Allow-Headers': 'Content-Type',
            'Access-Control-Max-Age': '3600'
        }
        return ('', 204, headers)

    headers = {'Access-Control-Allow-Origin': '*', 'Content-Type': 'application/json'}

    if request.method != 'POST':
        return json_response({'error': 'Method not allowed'}, 405, headers)

    if not GEMINI_API_KEY:
        return json_response({'error': 'GEMINI_API_KEY not configured'}, 500, headers)

    request_data = request.get_json(silent=True)
    if request_data is None:
        return json_response({'error': 'Invalid request body'}, 400, headers)

    try:
        response = forward_to_gemini(request_data, GEMINI_API_KEY)

        # Read as text first: error bodies are not always JSON
        response_text = response.text

        if not response.ok:
            print(f"Gemini API error: {response.status_code} - {response_text[:200]}")
            return json_response({
                'error': 'Gemini API error',
                'details': response_text
            }, response.status_code, headers)

        return (response_text, 200, headers)

    except Exception as e:
        print(f"Gemini request failed: {e}")
        return json_response({'error': 'Server error', 'details': str(e)}, 500, headers)
