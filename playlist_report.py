#!/usr/bin/env python3
"""
Playlist Report
===============
Turns the playlist records collected from "Discovered On" pages into a ranked
HTML report: duplicates are collapsed by title, the rest are sorted by how many
times each playlist was saved, and a single self-contained page is written.

The output path defaults to playlists.html; PLAYLISTS_HTML is an optional override.
"""

import html
import os
import re
from typing import Iterable, List, NamedTuple, Optional

from dotenv import load_dotenv

load_dotenv()

# === CONFIGURATION ===
class Config:
    OUTPUT_FILE = os.getenv("PLAYLISTS_HTML", "playlists.html")
    REPORT_TITLE = "Playlists featuring the artist and related artists"


# === DATA MODEL ===
def normalize_save_count(saves: Optional[str]) -> int:
    """Turn save badge text like '1,234 saves' into 1234 (0 when unreadable)"""
    digits = re.sub(r'[^0-9]', '', saves or '')
    if not digits:
        return 0
    return int(digits)


class PlaylistRecord(NamedTuple):
    title: str
    description: str
    save_count_raw: str
    save_count: int
    creator_name: str
    creator_profile_url: str
    track_summary: str
    image_url: str

    @classmethod
    def from_details(cls, title: str, description: str, saves: str, creator_name: str,
                     creator_profile_url: str, track_summary: str, image_url: str) -> 'PlaylistRecord':
        return cls(
            title=title,
            description=description,
            save_count_raw=saves,
            save_count=normalize_save_count(saves),
            creator_name=creator_name,
            creator_profile_url=creator_profile_url,
            track_summary=track_summary,
            image_url=image_url,
        )


# === PIPELINE STAGES ===
def deduplicate_by_title(records: Iterable[PlaylistRecord]) -> List[PlaylistRecord]:
    """
    Collapse records sharing a title.
    The last record seen wins in full, but keeps the slot where the title first appeared.
    """
    by_title = {}
    for record in records:
        by_title[record.title] = record
    return list(by_title.values())


def rank_by_saves(records: Iterable[PlaylistRecord]) -> List[PlaylistRecord]:
    """Sort by normalized save count, most saved first; ties keep their order"""
    return sorted(records, key=lambda record: record.save_count, reverse=True)


# === HTML RENDERING ===
def build_playlist_html(record: PlaylistRecord) -> str:
    title = html.escape(record.title)
    creator = html.escape(record.creator_name)
    return (
        '<div class="playlist">\n'
        f'  <img src="{html.escape(record.image_url)}" alt="{title}">\n'
        '  <div class="playlist-info">\n'
        f'    <h2>{title}</h2>\n'
        f'    <p><strong>Description:</strong> {html.escape(record.description)}</p>\n'
        f'    <p><strong>Times saved:</strong> {html.escape(record.save_count_raw)}</p>\n'
        '    <p>\n'
        '      <strong>Creator:</strong>\n'
        f'      <a href="{html.escape(record.creator_profile_url)}" target="_blank">{creator}</a>\n'
        '    </p>\n'
        f'    <p><strong>Name to copy:</strong> {creator}</p>\n'
        f'    <p><strong>Details:</strong> {html.escape(record.track_summary)}</p>\n'
        '  </div>\n'
        '</div>'
    )


def render_report(records: List[PlaylistRecord]) -> str:
    """Render ranked records as one HTML document with inline styling"""
    playlists_html = "\n".join(build_playlist_html(record) for record in records)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{html.escape(Config.REPORT_TITLE)}</title>
  <style>
    body {{
      font-family: Arial, sans-serif;
      background-color: #f8f8f8;
      color: #333;
      margin: 0;
      padding: 20px;
    }}
    .playlist {{
      border: 1px solid #ddd;
      border-radius: 8px;
      background: #fff;
      margin-bottom: 20px;
      padding: 20px;
      display: flex;
      align-items: center;
    }}
    .playlist img {{
      width: 100px;
      height: 100px;
      border-radius: 8px;
      margin-right: 20px;
    }}
    .playlist-info {{
      flex: 1;
    }}
    .playlist-info h2 {{
      margin: 0 0 10px;
    }}
    .playlist-info p {{
      margin: 5px 0;
    }}
    .playlist-info a {{
      color: #0073e6;
      text-decoration: none;
    }}
    p.meta {{
      color: #777;
    }}
  </style>
</head>
<body>
  <h1>{html.escape(Config.REPORT_TITLE)}</h1>
  <p class="meta">{len(records)} playlist(s), ranked by times saved</p>
{playlists_html}
</body>
</html>
"""


def write_report(html_content: str, output_file: Optional[str] = None) -> str:
    """Write the report, replacing any previous one. Returns the path written"""
    output_file = output_file or Config.OUTPUT_FILE
    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(html_content)
    print(f"💾 Report saved to: {output_file}")
    return output_file
