"""
In-page scripts for the list view.

This module contains JavaScript evaluated in the browser. The scripts only
collect raw facts about candidate elements and move the scroll position;
deciding which candidates are list entries happens in Python
(see src.scraper.heuristics).

All scripts take the list container selector as their first argument so the
selectors stay configurable from one place.
"""

# Selector of the sidebar that holds the list
LIST_CONTAINER_SELECTOR = '[role="main"]'

# Elements inside the container that may represent a list entry
CANDIDATE_SELECTOR = 'a, [role="button"], [jsaction]'

# Scrollable feed inside the container (falls back to the container itself)
FEED_SELECTOR = '[role="feed"]'


# Raw facts for every candidate, in document order
COLLECT_CANDIDATES_JS = r"""
([containerSel, candidateSel]) => {
  const container = document.querySelector(containerSel);
  if (!container) return [];
  return Array.from(container.querySelectorAll(candidateSel)).map(el => {
    const rect = el.getBoundingClientRect();
    return {
      text: el.textContent || '',
      width: rect.width,
      height: rect.height,
      inContainer: !!el.closest(containerSel)
    };
  });
}
"""

# Element handle of the candidate at a raw position (same ordering as above)
CANDIDATE_AT_JS = r"""
([containerSel, candidateSel, position]) => {
  const container = document.querySelector(containerSel);
  if (!container) return null;
  const candidates = container.querySelectorAll(candidateSel);
  return candidates[position] || null;
}
"""

# Incremental scroll of the feed, keeps new entries loading
SCROLL_BY_JS = r"""
([containerSel, feedSel, step]) => {
  const container = document.querySelector(containerSel);
  if (!container) return false;
  const el = container.querySelector(feedSel) || container;
  el.scrollTop += step;
  return true;
}
"""

# Jump the feed to its bottom; returns whether the position moved
SCROLL_TO_BOTTOM_JS = r"""
([containerSel, feedSel]) => {
  const container = document.querySelector(containerSel);
  if (!container) return false;
  const el = container.querySelector(feedSel) || container;
  const before = el.scrollTop;
  el.scrollTop = el.scrollHeight;
  return el.scrollTop !== before;
}
"""
