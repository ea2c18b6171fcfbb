from xml.sax.saxutils import escape
from flask import Blueprint, Response, current_app, jsonify, request
from solvefy.services.hierarchy import LEVELS, resolve_context, sitemap_entries
from solvefy.store_init import get_store

bp = Blueprint('main', __name__)


@bp.route('/health')
def health():
    return jsonify({'success': True, 'data': {'status': 'ok', 'collections': get_store().collections}})


@bp.route('/api/context', methods=['GET'])
def context():
    """Ancestors of a subject, grade, book, lesson or question, by id or slug."""
    keys = {}
    for level in LEVELS:
        keys[f'{level}_id'] = request.args.get(f'{level}Id')
        keys[f'{level}_slug'] = request.args.get(f'{level}Slug')
    return jsonify({'success': True, 'data': resolve_context(**keys)})


@bp.route('/sitemap.xml')
def sitemap():
    lines = ['<?xml version="1.0" encoding="UTF-8"?>',
             '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">']
    for entry in sitemap_entries(current_app.config['SITE_URL']):
        lines.append('  <url>')
        lines.append(f"    <loc>{escape(entry['url'])}</loc>")
        if entry['lastmod']:
            lines.append(f"    <lastmod>{entry['lastmod']}</lastmod>")
        lines.append(f"    <changefreq>{entry['changefreq']}</changefreq>")
        lines.append(f"    <priority>{entry['priority']:.1f}</priority>")
        lines.append('  </url>')
    lines.append('</urlset>')
    return Response('\n'.join(lines), mimetype='application/xml')
