"""
Remediation Text

Turns detector output into plain-language, numbered fix steps that name
the site's actual page paths, plus a one-line problem statement for
report headers.
"""

from typing import Union

from siteaudit.classifiers import page_type_label
from siteaudit.models import (
    CannibalizationConflict,
    ContentOverlapGroup,
    ExactKeywordConflict,
    UrlType,
    WrongPageRanking,
)


def _steps(*lines: str) -> str:
    return "\n".join(f"{i}. {line}" for i, line in enumerate(lines, start=1))


def serp_conflict_fix(conflict: CannibalizationConflict) -> str:
    """Fix steps for a SERP-verified conflict."""
    keyword = conflict.keyword
    primary_path = conflict.primary.path or "/"
    competitor = conflict.competitors[0] if conflict.competitors else None
    competitor_path = (competitor.path if competitor else "") or "/"

    if conflict.wrong_page_winning:
        label = page_type_label(conflict.competitor_type)
        return _steps(
            f'Strengthen {competitor_path} (your {label}) with more specific content about '
            f'"{keyword}", a prominent phone number and photos of your work.',
            f'Link from {primary_path} to {competitor_path} using "{keyword}" as the link text.',
            f'Cut back "{keyword}"-specific wording on {primary_path} so it stays broad and '
            f'Google stops ranking it for this search.',
        )

    competitor_position = competitor.position if competitor else 0
    return (
        f'Google shows both {primary_path} (#{conflict.primary.position}) and '
        f'{competitor_path} (#{competitor_position}) for "{keyword}", splitting clicks '
        f'between two pages instead of concentrating them on one.\n\n{conflict.conflict_fix}'
    )


def wrong_page_fix(item: WrongPageRanking) -> str:
    """Fix steps for a page type that doesn't match the keyword's intent."""
    ideal = page_type_label(item.ideal_page_type)
    keyword = item.keyword

    if item.page_type == UrlType.BLOG:
        topic = " ".join(keyword.split()[:3])
        return _steps(
            f'Create a dedicated {ideal} for "{keyword}" with your phone number at the top, '
            f'what you offer and your service area.',
            f'Refocus {item.path} on a specific question instead (such as "how much does '
            f'{topic} cost?"). Keep it informational.',
            'Link from the blog post to the new page so readers ready to hire can find it.',
        )
    if item.page_type == UrlType.HOMEPAGE:
        return _steps(
            f'Create or strengthen a dedicated {ideal} for "{keyword}" with specific service '
            f'details and a visible phone number.',
            f'Link from your homepage to that {ideal} using "{keyword}" as the link text.',
            f'Use "{keyword}" word-for-word less often on the homepage. Mention the service '
            f'without optimizing the homepage for this exact search.',
        )
    return _steps(
        f'Create a dedicated {ideal} for "{keyword}" with clear service information, your '
        f'service area and a prominent call to action.',
        f'Link to it from {item.path} using "{keyword}" as the anchor text.',
        'This tells Google which page you actually want ranking for this search.',
    )


def exact_conflict_fix(item: ExactKeywordConflict) -> str:
    """Fix steps for two pages ranking for the same keywords."""
    top_keyword = item.shared_keywords[0].keyword if item.shared_keywords else "these keywords"
    page_a, page_b = item.page_a, item.page_b
    types = {page_a.url_type, page_b.url_type}

    if types == {UrlType.SERVICE, UrlType.LOCATION}:
        service = page_a if page_a.url_type == UrlType.SERVICE else page_b
        location = page_b if service is page_a else page_a
        return _steps(
            f'Keep {service.path} (your {page_type_label(service.url_type)}) as the main page '
            f'for "{top_keyword}". It covers the service broadly.',
            f'Open {location.path} (your {page_type_label(location.url_type)}) with its city in '
            f'the first sentence, add the local address and city-specific details.',
            'Once each page covers something distinct, Google can rank the service page for '
            'general searches and the city page for local ones.',
        )
    if page_a.url_type == UrlType.LOCATION and page_b.url_type == UrlType.LOCATION:
        return _steps(
            f'Give {page_a.path} content that only fits its city: the city name in sentence '
            f'one, the address, parking info and local photos.',
            f'Do the same for {page_b.path} so it is not a copy with the city name swapped.',
            'Genuinely different pages stop competing, and each ranks for searches in its own city.',
        )

    stronger = page_a if page_a.best_position <= page_b.best_position else page_b
    weaker = page_b if stronger is page_a else page_a
    return _steps(
        f'Choose {stronger.path} as the primary page for "{top_keyword}". It ranks better '
        f'(#{stronger.best_position} vs #{weaker.best_position}).',
        'Strengthen it with more content, photos and internal links from related pages.',
        f'Move {weaker.path} to a related but different angle by changing its title and H1.',
        f'Link from {weaker.path} to {stronger.path} for "{top_keyword}".',
    )


def content_overlap_fix(group: ContentOverlapGroup) -> str:
    """Fix steps for a group of pages whose headings target the same topic."""
    topic = group.shared_phrases[0] if group.shared_phrases else "this topic"
    services = [p for p in group.pages if p.url_type == UrlType.SERVICE]
    locations = [p for p in group.pages if p.url_type == UrlType.LOCATION]
    blogs = [p for p in group.pages if p.url_type == UrlType.BLOG]

    if services and locations:
        location_paths = ", ".join(p.path for p in locations)
        return _steps(
            f'Keep {services[0].path} as your main "{topic}" page for visitors anywhere.',
            f'Rewrite the opening of each city page ({location_paths}) to lead with its city, '
            f'the local address and something unique to that location.',
            'Distinct city pages rank for city searches while the main page ranks for general ones.',
        )
    if len(locations) >= 2:
        return "Fix each page individually:\n" + _steps(
            'Put the city name in the very first sentence, not just the title.',
            "Add that location's address, parking info and a location-specific photo.",
            "Place reviews from customers in that city on that city's page only.",
        )
    if blogs and services:
        return _steps(
            f'Make {services[0].path} the definitive page for "{topic}" with more content, '
            f'photos of your work and a clear call to action.',
            f'Rewrite {blogs[0].path} to answer a specific question about "{topic}" and keep it '
            f'informational.',
            'Link prominently from the blog post to the service page.',
        )

    paths = ", ".join(p.path for p in group.pages)
    return _steps(
        f'Pick ONE page as your primary "{topic}" page, usually the one with the cleanest URL.',
        'Strengthen it: match the title and H1 to what people search for and point internal '
        'links to it.',
        f'Rewrite the other pages ({paths}) to cover related but distinct topics.',
    )


def problem_statement(item: Union[WrongPageRanking, ContentOverlapGroup]) -> str:
    """One-sentence description of a wrong-page ranking or content overlap group."""
    if isinstance(item, WrongPageRanking):
        if item.page_type == UrlType.BLOG:
            return (
                f'A blog post is ranking for "{item.keyword}", but people searching that are '
                f'ready to hire, not looking for an article.'
            )
        if item.page_type == UrlType.HOMEPAGE:
            return (
                f'Your homepage is ranking for "{item.keyword}" instead of a dedicated page. '
                f'Homepages are too general to convert these visitors.'
            )
        return (
            f'A {page_type_label(item.page_type)} is showing up for "{item.keyword}" when a '
            f'{page_type_label(item.ideal_page_type)} would convert this traffic better.'
        )

    topic = item.shared_phrases[0] if item.shared_phrases else "this topic"
    count = len(item.pages)
    services = sum(1 for p in item.pages if p.url_type == UrlType.SERVICE)
    locations = sum(1 for p in item.pages if p.url_type == UrlType.LOCATION)

    if services and locations:
        plural = "s" if locations > 1 else ""
        return (
            f'Your service page and {locations} city page{plural} all target "{topic}". '
            f'Google will rank one and mostly ignore the others.'
        )
    if locations >= 3:
        return (
            f'{count} location pages cover "{topic}" with nearly identical content, so Google '
            f'ranks only the strongest one.'
        )
    return (
        f'{count} pages on your site all target "{topic}". Google will rank one and mostly '
        f'ignore the rest.'
    )
