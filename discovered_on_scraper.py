#!/usr/bin/env python3
"""
Discovered On Playlist Scraper
==============================
Opens a Spotify artist in the browser, finds up to five related artists, then
walks the "Discovered On" page of the artist and of each related artist. Every
playlist card is opened, its details are read, and the browser goes back to the
listing before the next card. The collected playlists are written to an HTML
report ranked by how many times they were saved.

Every setting has a built-in default. The environment variables (or a .env
file) read below are optional overrides; a plain run needs none of them:
SPOTIFY_ARTIST_ID, SPOTIFY_LOCALE, INCLUDE_RELATED_ARTISTS, HEADLESS.
"""

import os
import re
from contextlib import contextmanager
from typing import Iterator, List, NamedTuple, Optional, Tuple

from dotenv import load_dotenv
from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from playlist_report import (
    PlaylistRecord,
    deduplicate_by_title,
    rank_by_saves,
    render_report,
    write_report,
)

load_dotenv()


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ['1', 'true', 'yes', 'y', 'on']


# === CONFIGURATION ===
class Config:
    # Spotify settings
    ARTIST_ID = os.getenv("SPOTIFY_ARTIST_ID", "3RavPo6KxPBl0pi612Mg8U")
    LOCALE = os.getenv("SPOTIFY_LOCALE", "intl-es")
    BASE_URL = "https://open.spotify.com"

    # Related artists
    INCLUDE_RELATED_ARTISTS = env_flag("INCLUDE_RELATED_ARTISTS", True)
    RELATED_ARTIST_LIMIT = 5

    # Browser settings
    HEADLESS = env_flag("HEADLESS", False)

    # Wait settings (seconds)
    GRID_TIMEOUT = 30
    LISTING_TIMEOUT = 5
    DETAIL_TIMEOUT = 5
    POLL_FREQUENCY = 0.5

    # Page markup
    GRID_SELECTOR = 'div[data-testid="grid-container"]'
    RELATED_ARTIST_SELECTOR = 'div[data-testid="grid-container"] [id^="card-subtitle-spotify:artist:"]'
    PLAYLIST_CARD_SELECTOR = 'div[role="button"]'
    DETAIL_CONTAINER_SELECTOR = 'div.RP2rRchy4i8TIp1CTmb7'
    TITLE_SELECTOR = 'h1[data-encore-id="text"]'
    DESCRIPTION_SELECTOR = 'div.xgmjVLxjqfcXK5BV_XyN'
    SAVES_SELECTOR = 'span.w1TBi3o5CTM7zW1EB3Bm'
    CREATOR_LINK_SELECTOR = 'a[data-testid="creator-link"]'
    TRACK_SUMMARY_SELECTOR = 'div.GI8QLntnaSCh2ONX_y2c'
    IMAGE_SELECTOR = 'div[data-testid="playlist-image"] img'

    # Placeholders for missing fields
    MISSING_TITLE = "Untitled"
    MISSING_DESCRIPTION = "No description"
    MISSING_SAVES = "Not available"
    MISSING_CREATOR = "Unknown"
    MISSING_CREATOR_LINK = "No link"
    MISSING_TRACK_SUMMARY = "No details"
    MISSING_IMAGE = "No image"


RELATED_ARTIST_PATTERN = re.compile(r'card-subtitle-spotify:artist:([^-\s]+)')


# === ERRORS ===
class ScraperError(Exception):
    pass


class FatalNavigationError(ScraperError):
    """The root artist page never rendered its related artists grid"""


class RecoverableEnumerationError(ScraperError):
    """An artist's Discovered On page showed no playlists in time"""


class RecoverableExtractionError(ScraperError):
    """A single playlist card could not be opened or read"""


class CandidateDescriptor(NamedTuple):
    aria_label: str
    selector: str

    @classmethod
    def for_label(cls, aria_label: str) -> 'CandidateDescriptor':
        return cls(aria_label, f'{Config.PLAYLIST_CARD_SELECTOR}[aria-labelledby="{aria_label}"]')


# === UTILITY FUNCTIONS ===
def parse_artist_id(entry: str) -> str:
    """Accept a bare artist ID or an open.spotify.com artist URL"""
    entry = (entry or '').strip()

    if "open.spotify.com/" in entry and "/artist/" in entry:
        artist_id = entry.split('/artist/')[1].split('/')[0].split('?')[0]
    else:
        artist_id = entry

    if len(artist_id) == 22 and artist_id.isalnum():
        return artist_id
    raise ValueError(f"Invalid artist ID format: {entry!r}")


def artist_url(artist_id: str) -> str:
    return f"{Config.BASE_URL}/{Config.LOCALE}/artist/{artist_id}"


def discovered_on_url(artist_id: str) -> str:
    return f"{artist_url(artist_id)}/discovered-on"


def wait_for_element(driver, selector: str, timeout: float):
    """Block until an element matching selector exists, raising TimeoutException otherwise"""
    wait = WebDriverWait(driver, timeout, poll_frequency=Config.POLL_FREQUENCY)
    return wait.until(EC.presence_of_element_located((By.CSS_SELECTOR, selector)))


def first_text(parent, selector: str, default: str) -> str:
    elements = parent.find_elements(By.CSS_SELECTOR, selector)
    if not elements:
        return default
    text = (elements[0].text or '').strip()
    return text or default


def first_attribute(parent, selector: str, attribute: str, default: str) -> str:
    elements = parent.find_elements(By.CSS_SELECTOR, selector)
    if not elements:
        return default
    value = elements[0].get_attribute(attribute)
    return value or default


def create_driver():
    """Start the Chrome session used for the whole run"""
    options = webdriver.ChromeOptions()
    options.add_argument("--disable-blink-features=AutomationControlled")
    options.add_experimental_option("excludeSwitches", ["enable-automation"])
    options.add_experimental_option('useAutomationExtension', False)
    if Config.HEADLESS:
        options.add_argument("--headless=new")

    return webdriver.Chrome(options=options)


# === RELATED ARTISTS ===
def get_related_artist_ids(driver, artist_id: str) -> List[str]:
    """Read the first related artist IDs from the artist page grid"""
    url = artist_url(artist_id)
    print(f"🔗 Opening: {url}")
    driver.get(url)

    try:
        wait_for_element(driver, Config.GRID_SELECTOR, Config.GRID_TIMEOUT)
    except TimeoutException as e:
        raise FatalNavigationError(f"Related artists grid never loaded for artist {artist_id}") from e

    related_ids = []
    for element in driver.find_elements(By.CSS_SELECTOR, Config.RELATED_ARTIST_SELECTOR):
        match = RELATED_ARTIST_PATTERN.search(element.get_attribute('id') or '')
        if match:
            related_ids.append(match.group(1))

    related_ids = related_ids[:Config.RELATED_ARTIST_LIMIT]
    print(f"🎤 Found {len(related_ids)} related artists for {artist_id}")
    return related_ids


# === DISCOVERED ON LISTING ===
def enumerate_playlist_candidates(driver, artist_id: str) -> Iterator[CandidateDescriptor]:
    """
    Open the artist's Discovered On page and describe every playlist card on it.
    Labels are read right away because the listing re-renders after every visit;
    each descriptor is resolved again when it is used.
    """
    url = discovered_on_url(artist_id)
    print(f"🔗 Opening: {url}")
    driver.get(url)

    try:
        wait_for_element(driver, Config.PLAYLIST_CARD_SELECTOR, Config.LISTING_TIMEOUT)
    except TimeoutException as e:
        raise RecoverableEnumerationError(f"No playlists showed up for artist {artist_id}") from e

    labels = []
    for element in driver.find_elements(By.CSS_SELECTOR, Config.PLAYLIST_CARD_SELECTOR):
        label = element.get_attribute('aria-labelledby')
        if label:
            labels.append(label)
        else:
            print(f"   ⚠️  Skipping playlist card without aria-labelledby on {url}")

    print(f"📋 Found {len(labels)} playlist cards for artist {artist_id}")
    return (CandidateDescriptor.for_label(label) for label in labels)


def return_to_listing(driver, listing_url: str):
    """Get back to the Discovered On page and wait for its cards to render again"""
    # A click that never navigated leaves us on the listing already
    if driver.current_url != listing_url:
        driver.back()
    if driver.current_url != listing_url:
        driver.get(listing_url)
    try:
        wait_for_element(driver, Config.PLAYLIST_CARD_SELECTOR, Config.LISTING_TIMEOUT)
    except TimeoutException:
        print("   ⚠️  Listing did not render again after going back")


# === PLAYLIST DETAILS ===
@contextmanager
def playlist_detail_view(driver, candidate: CandidateDescriptor):
    """
    Open a playlist card and yield its detail container.
    Whatever happens once the card was clicked, the browser is sent back to
    the listing before the block is left.
    """
    elements = driver.find_elements(By.CSS_SELECTOR, candidate.selector)
    if not elements:
        raise RecoverableExtractionError(f"Playlist card vanished: {candidate.selector}")

    listing_url = driver.current_url
    try:
        elements[0].click()
    except WebDriverException as e:
        raise RecoverableExtractionError(f"Could not click playlist card: {candidate.selector}") from e

    try:
        try:
            container = wait_for_element(driver, Config.DETAIL_CONTAINER_SELECTOR, Config.DETAIL_TIMEOUT)
        except TimeoutException as e:
            raise RecoverableExtractionError(f"Playlist details never loaded: {candidate.selector}") from e
        yield container
    finally:
        return_to_listing(driver, listing_url)


def extract_playlist_details(driver, container) -> PlaylistRecord:
    """Read the seven playlist fields; each missing one falls back to its placeholder"""
    return PlaylistRecord.from_details(
        title=first_text(container, Config.TITLE_SELECTOR, Config.MISSING_TITLE),
        description=first_text(container, Config.DESCRIPTION_SELECTOR, Config.MISSING_DESCRIPTION),
        saves=first_text(container, Config.SAVES_SELECTOR, Config.MISSING_SAVES),
        creator_name=first_text(container, Config.CREATOR_LINK_SELECTOR, Config.MISSING_CREATOR),
        creator_profile_url=first_attribute(container, Config.CREATOR_LINK_SELECTOR, 'href',
                                            Config.MISSING_CREATOR_LINK),
        track_summary=first_text(container, Config.TRACK_SUMMARY_SELECTOR, Config.MISSING_TRACK_SUMMARY),
        # The cover image sits outside the details container
        image_url=first_attribute(driver, Config.IMAGE_SELECTOR, 'src', Config.MISSING_IMAGE),
    )


def scrape_artist_playlists(driver, artist_id: str) -> List[PlaylistRecord]:
    """Open every playlist on the artist's Discovered On page, one at a time"""
    records = []

    for candidate in enumerate_playlist_candidates(driver, artist_id):
        try:
            with playlist_detail_view(driver, candidate) as container:
                record = extract_playlist_details(driver, container)
        except (RecoverableExtractionError, WebDriverException) as e:
            print(f"   ⚠️  Error processing playlist {candidate.aria_label}: {e}")
            continue

        records.append(record)
        print(f"   ✅ {record.title} ({record.save_count_raw})")

    return records


# === ORCHESTRATION ===
def collect_artist_playlists(driver, artist_id: str,
                             include_related: Optional[bool] = None) -> Tuple[List[PlaylistRecord], dict]:
    """
    Scrape the root artist and, when enabled, its related artists in order.
    Returns all records in traversal order plus per-run counters.
    """
    if include_related is None:
        include_related = Config.INCLUDE_RELATED_ARTISTS

    related_ids = get_related_artist_ids(driver, artist_id) if include_related else []
    artist_ids = [artist_id] + related_ids

    all_records = []
    stats = {'artists_ok': 0, 'artists_failed': 0, 'playlists': 0}

    for i, current_id in enumerate(artist_ids, 1):
        role = "root artist" if i == 1 else "related artist"
        print(f"\n{'='*60}")
        print(f"🎤 Collecting playlists from {role} {i}/{len(artist_ids)}: {current_id}")
        print(f"{'='*60}")

        try:
            records = scrape_artist_playlists(driver, current_id)
        except (RecoverableEnumerationError, WebDriverException) as e:
            print(f"❌ Error processing artist {current_id}: {e}")
            stats['artists_failed'] += 1
            continue

        all_records.extend(records)
        stats['artists_ok'] += 1
        stats['playlists'] += len(records)
        print(f"📊 {len(records)} playlists collected for artist {current_id}")

    return all_records, stats


def run_pipeline(driver, artist_id: str, output_file: Optional[str] = None,
                 include_related: Optional[bool] = None) -> List[PlaylistRecord]:
    """Collect, deduplicate, rank and render. Returns the ranked records"""
    records, stats = collect_artist_playlists(driver, artist_id, include_related)

    unique_records = deduplicate_by_title(records)
    ranked_records = rank_by_saves(unique_records)
    written_to = write_report(render_report(ranked_records), output_file)

    print(f"\n📊 Run Summary:")
    print(f"   ✅ Artists processed: {stats['artists_ok']}")
    print(f"   ❌ Artists failed: {stats['artists_failed']}")
    print(f"   📋 Playlists extracted: {stats['playlists']}")
    print(f"   🔄 Unique playlists after merging titles: {len(ranked_records)}")
    print(f"   📁 Report: {written_to}")

    return ranked_records


def main():
    """Main function to run the Discovered On playlist scraper"""
    print("🎵 Spotify Discovered On Playlist Scraper")
    print("=" * 60)

    artist_id = parse_artist_id(Config.ARTIST_ID)
    print(f"🆔 Artist ID: {artist_id}")

    driver = create_driver()
    print("🌐 Browser opened successfully")

    try:
        run_pipeline(driver, artist_id)
    except FatalNavigationError as e:
        print(f"❌ Critical error: {e}")
        raise
    finally:
        driver.quit()
        print("✅ Browser closed")


if __name__ == "__main__":
    main()
