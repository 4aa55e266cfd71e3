"""In-memory stand-ins for the Selenium driver and the Spotify pages it visits."""

from selenium.common.exceptions import NoSuchElementException

import discovered_on_scraper as scraper
from discovered_on_scraper import CandidateDescriptor, Config


class FakeElement:
    """Just enough of a WebElement: text, attributes, nested lookups and clicks."""

    def __init__(self, text="", attributes=None, children=None, on_click=None, raise_on_click=None):
        self.text = text
        self.attributes = attributes or {}
        self.children = children or {}
        self.on_click = on_click
        self.raise_on_click = raise_on_click

    def get_attribute(self, name):
        return self.attributes.get(name)

    def find_elements(self, by, selector):
        return list(self.children.get(selector, []))

    def find_element(self, by, selector):
        elements = self.find_elements(by, selector)
        if not elements:
            raise NoSuchElementException(selector)
        return elements[0]

    def click(self):
        if self.raise_on_click:
            raise self.raise_on_click
        if self.on_click:
            self.on_click()


class FakeDriver:
    """Pages keyed by URL, each page a dict of CSS selector -> elements."""

    def __init__(self):
        self.pages = {}
        self.history = []
        self.events = []
        self.quit_called = False

    @property
    def current_url(self):
        return self.history[-1] if self.history else "about:blank"

    def get(self, url):
        self.history.append(url)
        self.events.append(("get", url))

    def back(self):
        if len(self.history) > 1:
            self.history.pop()
        self.events.append(("back", self.current_url))

    def find_elements(self, by, selector):
        page = self.pages.get(self.current_url, {})
        return list(page.get(selector, []))

    def find_element(self, by, selector):
        elements = self.find_elements(by, selector)
        if not elements:
            raise NoSuchElementException(selector)
        return elements[0]

    def quit(self):
        self.quit_called = True


class FakeSpotify:
    """Builds artist and Discovered On pages on top of a FakeDriver."""

    def __init__(self):
        self.driver = FakeDriver()

    def add_artist_page(self, artist_id, related_ids=(), with_grid=True, extra_ids=()):
        page = {}
        if with_grid:
            page[Config.GRID_SELECTOR] = [FakeElement()]
            page[Config.RELATED_ARTIST_SELECTOR] = [
                FakeElement(attributes={"id": f"card-subtitle-spotify:artist:{rid}-{i}"})
                for i, rid in enumerate(related_ids)
            ] + [FakeElement(attributes={"id": extra}) for extra in extra_ids]
        self.driver.pages[scraper.artist_url(artist_id)] = page

    def add_discovered_on(self, artist_id, playlists, vanished=(), dead_clicks=(), rejected=None,
                          unlabeled=0):
        """
        playlists: list of field dicts, or None for a card whose details never load.
        vanished: indexes of cards that are listed but cannot be found again.
        dead_clicks: indexes of cards whose click registers but never navigates.
        rejected: index -> exception the driver raises when that card is clicked.
        unlabeled: number of extra cards listed without an aria-labelledby.
        """
        rejected = rejected or {}
        listing_url = scraper.discovered_on_url(artist_id)
        page = {Config.PLAYLIST_CARD_SELECTOR: []}

        for i, playlist in enumerate(playlists):
            label = f"{artist_id}-card-{i}"
            detail_url = None if i in dead_clicks else f"{listing_url}/playlist-{i}"
            card = FakeElement(
                attributes={"aria-labelledby": label},
                on_click=self._navigator(detail_url, label),
                raise_on_click=rejected.get(i),
            )
            page[Config.PLAYLIST_CARD_SELECTOR].append(card)
            page[CandidateDescriptor.for_label(label).selector] = [] if i in vanished else [card]
            if detail_url:
                self.driver.pages[detail_url] = self._detail_page(playlist)

        page[Config.PLAYLIST_CARD_SELECTOR].extend(FakeElement() for _ in range(unlabeled))

        if not page[Config.PLAYLIST_CARD_SELECTOR]:
            page = {}
        self.driver.pages[listing_url] = page
        return page

    def _navigator(self, url, label):
        def click():
            self.driver.events.append(("click", label))
            if url:
                self.driver.get(url)
        return click

    @staticmethod
    def _detail_page(playlist):
        if playlist is None:
            return {}

        children = {}
        if "title" in playlist:
            children[Config.TITLE_SELECTOR] = [FakeElement(playlist["title"])]
        if "description" in playlist:
            children[Config.DESCRIPTION_SELECTOR] = [FakeElement(playlist["description"])]
        if "saves" in playlist:
            children[Config.SAVES_SELECTOR] = [FakeElement(playlist["saves"])]
        if "creator" in playlist:
            children[Config.CREATOR_LINK_SELECTOR] = [
                FakeElement(playlist["creator"], attributes={"href": playlist.get("creator_link")})
            ]
        if "summary" in playlist:
            children[Config.TRACK_SUMMARY_SELECTOR] = [FakeElement(playlist["summary"])]

        page = {Config.DETAIL_CONTAINER_SELECTOR: [FakeElement(children=children)]}
        if "image" in playlist:
            page[Config.IMAGE_SELECTOR] = [FakeElement(attributes={"src": playlist["image"]})]
        return page


def full_playlist(title, saves, **overrides):
    playlist = {
        "title": title,
        "description": f"{title} description",
        "saves": saves,
        "creator": "Spotify",
        "creator_link": "https://open.spotify.com/user/spotify",
        "summary": "50 songs, about 3 hr",
        "image": f"https://i.scdn.co/image/{title.lower()}",
    }
    playlist.update(overrides)
    return playlist
