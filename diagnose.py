"""Diagnostic script to check that the diagram backend and its tools are working."""

import argparse
import shutil
import sys
from datetime import datetime

import requests

from dumplens.config import get_config
from dumplens.utils.logging import get_logger, setup_logging

BASE_URL = "http://127.0.0.1:8000"

SAMPLE_DIAGRAM = (
    "erDiagram\n"
    "    public_customers {\n"
    '        integer id PK "NOT NULL"\n'
    "        text email\n"
    "    }\n"
    "    public_orders {\n"
    '        integer id PK "NOT NULL"\n'
    "        integer customer_id\n"
    "    }\n"
    '    public_customers ||--o{ public_orders : "orders_customer_id_fkey"\n'
)

logger = get_logger(__name__)


def print_header(text):
    print("\n" + "=" * 80)
    print(text)
    print("=" * 80)


def test_graphviz_installed():
    """Check the graphviz engine is on PATH."""
    print_header("TEST 1: Graphviz Engine")
    engine = get_config("renderer").get("engine", "dot")
    path = shutil.which(engine)
    if path:
        print(f"[OK] Found '{engine}' at {path}")
        return True
    print(f"[FAIL] '{engine}' not found on PATH")
    print("  Install graphviz (e.g. apt install graphviz / brew install graphviz)")
    return False


def test_backend_health(base_url):
    """Test if backend is running."""
    print_header("TEST 2: Backend Health Check")
    try:
        response = requests.get(f"{base_url}/health", timeout=5)
        if response.status_code == 200:
            print(f"[OK] Backend is running")
            print(f"  Response: {response.json()}")
            return True
        print(f"[FAIL] Backend returned status {response.status_code}")
        return False
    except requests.exceptions.ConnectionError:
        print("[FAIL] Cannot connect to backend")
        print(f"  Make sure backend is running on {base_url}")
        print("  Start it with: python -m uvicorn backend.main:app --host 127.0.0.1 --port 8000 --reload")
        return False


def test_render_endpoint(base_url):
    """Render a small diagram; returns the SVG on success."""
    print_header("TEST 3: Render Endpoint")
    try:
        response = requests.post(
            f"{base_url}/api/diagrams/render",
            json={"diagram_text": SAMPLE_DIAGRAM},
            timeout=30,
        )
    except requests.exceptions.RequestException as e:
        print(f"[FAIL] Request failed: {e}")
        return None

    if response.status_code == 422:
        print("[FAIL] Render rejected the diagram text")
        print(f"  Error: {response.json().get('error')}")
        return None
    if response.status_code != 200:
        print(f"[FAIL] Render endpoint returned status {response.status_code}")
        print(f"  Response: {response.text[:200]}")
        return None

    svg = response.text
    if "<svg" not in svg:
        print("[FAIL] Response is not an SVG document")
        return None

    print(f"[OK] Rendered {len(svg)} bytes of SVG")
    for entity in ("public_customers", "public_orders"):
        found = entity in svg
        print(f"  {entity}: {'present' if found else 'MISSING (WARNING)'}")
    return svg


def test_png_export(base_url, svg):
    """Export the rendered SVG as PNG and report which path was used."""
    print_header("TEST 4: PNG Export")
    try:
        response = requests.post(
            f"{base_url}/api/diagrams/export/png",
            json={"svg": svg, "filename": "diagnose"},
            timeout=60,
        )
    except requests.exceptions.RequestException as e:
        print(f"[FAIL] Request failed: {e}")
        return False

    if response.status_code != 200:
        print(f"[FAIL] PNG export returned status {response.status_code}")
        print(f"  Response: {response.text[:200]}")
        return False

    method = response.headers.get("X-Export-Method", "unknown")
    print(f"[OK] Exported {len(response.content)} bytes of PNG ({method} method)")
    if method == "fallback":
        print("  [WARNING] Primary rasterisation failed; check backend logs")
    return True


def test_dump_schema(base_url, dump_id):
    """Fetch a dump's schema and the neighborhood of its first table."""
    print_header(f"TEST 5: Dump Schema ({dump_id})")
    try:
        response = requests.get(f"{base_url}/api/dumps/{dump_id}/schema", timeout=30)
        if response.status_code != 200:
            print(f"[FAIL] Schema endpoint returned status {response.status_code}")
            print(f"  Response: {response.text[:200]}")
            return False

        data = response.json()
        stats = data["stats"]
        print(f"[OK] {stats['tables']} tables, {stats['foreign_keys']} foreign keys")
        print(f"  Schemas: {', '.join(data['schemas']) or '(none)'}")
        print(f"  Default schema: {data.get('default_schema')}")

        tables = data["schema_graph"]["tables"]
        if not tables:
            return True

        first = tables[0]
        response = requests.get(
            f"{base_url}/api/dumps/{dump_id}/tables/{first['schema_name']}/{first['table_name']}/neighborhood",
            params={"degrees": 1},
            timeout=30,
        )
        if response.status_code != 200:
            print(f"[FAIL] Neighborhood endpoint returned status {response.status_code}")
            return False
        neighborhood = response.json()
        print(
            f"  Neighborhood of {first['schema_name']}.{first['table_name']}: "
            f"{len(neighborhood['tables'])} tables, {len(neighborhood['foreign_keys'])} constraints"
        )
        return True
    except requests.exceptions.RequestException as e:
        print(f"[FAIL] Request failed: {e}")
        return False


def main():
    parser = argparse.ArgumentParser(description="Check the diagram backend")
    parser.add_argument("--base-url", default=BASE_URL)
    parser.add_argument("--dump-id", help="Also check schema endpoints for this dump")
    args = parser.parse_args()

    log_config = get_config("logging")
    setup_logging(
        level=log_config.get("level", "INFO"),
        format_type=log_config.get("format_type", "detailed"),
        log_to_file=log_config.get("log_to_file", False),
        log_file=log_config.get("log_file"),
    )

    print_header("BACKEND DIAGNOSTIC TOOL")
    print(f"Testing backend at: {args.base_url}")
    print(f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    results = [("Graphviz Engine", test_graphviz_installed())]

    health_result = test_backend_health(args.base_url)
    results.append(("Health Check", health_result))

    if health_result:
        svg = test_render_endpoint(args.base_url)
        results.append(("Render Endpoint", svg is not None))
        if svg is not None:
            results.append(("PNG Export", test_png_export(args.base_url, svg)))
        if args.dump_id:
            results.append(("Dump Schema", test_dump_schema(args.base_url, args.dump_id)))
    else:
        print("\nSkipping endpoint checks - backend must be running")

    print_header("SUMMARY")
    passed = sum(1 for _, result in results if result)
    for name, result in results:
        status = "[PASS]" if result else "[FAIL]"
        print(f"  {status}: {name}")
    print(f"\nResults: {passed}/{len(results)} checks passed")
    logger.info(f"Diagnostics finished: {passed}/{len(results)} passed")

    return 0 if passed == len(results) else 1


if __name__ == "__main__":
    sys.exit(main())
