from .proxy import SAM_SEARCH_URL, SamOpportunitiesProxy, extract_items, normalize_item, normalize_items, parse_timestamp

__all__ = ["SAM_SEARCH_URL", "SamOpportunitiesProxy", "extract_items", "normalize_item", "normalize_items", "parse_timestamp"]
