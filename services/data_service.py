# services/data_service.py

"""
Backend reads behind the dashboard screens.

Each fetcher takes a Supabase client and returns plain row dicts; any
client exception propagates so the caller can surface it. Scoping and
capability checks happen in core.access, never here.
"""

from datetime import datetime
from typing import Dict, List, Optional

from models.enums import FeedbackKind, FeedbackStatus, InterestStatus


MEMBER_COLUMNS = (
    "id, full_name, email, mobile_phone, role, default_mode, "
    "country, state, city, zipcode, created_at, updated_at"
)

ADDRESS_JOIN = "full_name, email, mobile_phone, country, state, city, zipcode"


def _index_by(rows: list, key: str) -> Dict[str, dict]:
    return {row[key]: row for row in (rows or []) if row.get(key) is not None}


def _created_at_key(row: dict):
    raw = row.get("created_at") or ""
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


# -----------------------------------------------------
# Members / buyers
# -----------------------------------------------------
def fetch_members(client) -> List[dict]:
    result = (
        client.table("users")
        .select(MEMBER_COLUMNS)
        .order("created_at", desc=True)
        .execute()
    )
    return result.data or []


def fetch_buyers(client) -> List[dict]:
    result = (
        client.table("users")
        .select(MEMBER_COLUMNS)
        .eq("default_mode", "buyer")
        .order("created_at", desc=True)
        .execute()
    )
    return result.data or []


def fetch_member(client, user_id: str) -> Optional[dict]:
    result = (
        client.table("users")
        .select(MEMBER_COLUMNS)
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def fetch_admin_target(client, user_id: str) -> Optional[dict]:
    """The fields admin management reads before it writes."""
    result = (
        client.table("users")
        .select("id, email, role, admin_assigned_location")
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def fetch_admins(client) -> List[dict]:
    result = (
        client.table("users")
        .select("id, full_name, email, role, admin_assigned_location, created_at, updated_at")
        .in_("role", ["admin", "super_admin"])
        .order("created_at", desc=True)
        .execute()
    )
    return result.data or []


# -----------------------------------------------------
# Sellers (seller_profiles + owning user)
# -----------------------------------------------------
def fetch_sellers(client) -> List[dict]:
    profiles = client.table("seller_profiles").select("*").execute().data or []
    if not profiles:
        return []

    user_ids = [p["user_id"] for p in profiles if p.get("user_id")]
    users = (
        client.table("users")
        .select("id, full_name, email, mobile_phone, city, state, country, zipcode, created_at")
        .in_("id", user_ids)
        .execute()
        .data
    )
    user_map = _index_by(users, "id")

    sellers = []
    for profile in profiles:
        user = user_map.get(profile.get("user_id"), {})
        sellers.append({
            **profile,
            "user_name": user.get("full_name"),
            "user_email": user.get("email"),
            "user_phone": user.get("mobile_phone"),
            "user_city": user.get("city"),
            "user_state": user.get("state"),
            "user_country": user.get("country"),
            "user_zipcode": user.get("zipcode"),
            "user_created_at": user.get("created_at"),
        })
    return sellers


# -----------------------------------------------------
# Orders (interests)
# -----------------------------------------------------
def fetch_interests(client) -> List[dict]:
    result = (
        client.table("interests")
        .select(
            f"*, buyer:users!buyer_id({ADDRESS_JOIN}), "
            "listing:listings!listing_id(name, price, seller_name)"
        )
        .order("created_at", desc=True)
        .execute()
    )

    orders = []
    for interest in result.data or []:
        buyer = interest.get("buyer") or {}
        listing = interest.get("listing") or {}
        orders.append({
            **interest,
            "status": interest.get("status") or InterestStatus.pending.value,
            "buyer_name": buyer.get("full_name"),
            "buyer_email": buyer.get("email"),
            "listing_name": listing.get("name"),
            "seller_name": listing.get("seller_name"),
            "price": listing.get("price"),
        })
    return orders


# -----------------------------------------------------
# Feedback + reviews, merged newest first
# -----------------------------------------------------
def fetch_feedback(client) -> List[dict]:
    items = []

    feedback_rows = (
        client.table("feedback")
        .select(f"*, user:users!user_id({ADDRESS_JOIN})")
        .order("created_at", desc=True)
        .execute()
        .data
    ) or []

    for row in feedback_rows:
        items.append({
            **row,
            "kind": FeedbackKind.feedback.value,
            "user_name": row.get("user_name") or (row.get("user") or {}).get("full_name") or "Unknown User",
            "status": row.get("status") or FeedbackStatus.new.value,
        })

    review_rows = (
        client.table("reviews")
        .select(
            f"*, user:users!user_id({ADDRESS_JOIN}), "
            "listing:listings!listing_id(name, seller_name)"
        )
        .order("created_at", desc=True)
        .execute()
        .data
    ) or []

    for row in review_rows:
        listing = row.get("listing") or {}
        review_type = row.get("review_type") or "product"
        if review_type == "product" and listing.get("name"):
            subject = f"Product Review: {listing['name']}"
        else:
            subject = f"{review_type} Review"

        items.append({
            **row,
            "kind": FeedbackKind.review.value,
            "user_name": (row.get("user") or {}).get("full_name") or "Unknown User",
            "subject": subject,
            "message": row.get("comment") or "",
            # Reviews have no workflow; they are shown as resolved
            "status": FeedbackStatus.resolved.value,
            "listing_name": listing.get("name"),
            "seller_name": listing.get("seller_name"),
        })

    return sorted(items, key=_created_at_key, reverse=True)


# -----------------------------------------------------
# Revenue reports
# -----------------------------------------------------
def fetch_farmer_revenue(client) -> List[dict]:
    """
    Revenue per farmer from accepted interests (price × quantity),
    sorted by revenue descending.
    """
    accepted = (
        client.table("interests")
        .select("id, status, quantity, seller_id, listing_id")
        .eq("status", InterestStatus.accepted.value)
        .execute()
        .data
    ) or []
    if not accepted:
        return []

    listing_ids = list({i["listing_id"] for i in accepted if i.get("listing_id")})
    seller_ids = list({i["seller_id"] for i in accepted if i.get("seller_id")})

    listings = _index_by(
        client.table("listings").select("id, name, price, seller_name").in_("id", listing_ids).execute().data,
        "id",
    )
    stores = _index_by(
        client.table("seller_profiles").select("user_id, store_name").in_("user_id", seller_ids).execute().data,
        "user_id",
    )
    users = _index_by(
        client.table("users").select("id, full_name, city, state, country, zipcode").in_("id", seller_ids).execute().data,
        "id",
    )

    stats: Dict[str, dict] = {}
    for interest in accepted:
        listing = listings.get(interest.get("listing_id"))
        if not listing:
            continue

        seller_id = interest.get("seller_id")
        try:
            price = float(listing.get("price") or 0)
        except (TypeError, ValueError):
            price = 0.0
        quantity = interest.get("quantity") or 1

        if seller_id not in stats:
            user = users.get(seller_id, {})
            store = stores.get(seller_id, {})
            stats[seller_id] = {
                "farmer_id": seller_id,
                "farmer_name": user.get("full_name") or listing.get("seller_name") or "Unknown",
                "business_name": store.get("store_name") or listing.get("seller_name") or "Unknown Business",
                "total_orders": 0,
                "accepted_orders": 0,
                "total_revenue": 0.0,
                "city": user.get("city"),
                "state": user.get("state"),
                "country": user.get("country"),
                "zipcode": user.get("zipcode"),
            }

        entry = stats[seller_id]
        entry["total_orders"] += 1
        entry["accepted_orders"] += 1
        entry["total_revenue"] += price * quantity

    return sorted(stats.values(), key=lambda s: s["total_revenue"], reverse=True)


def location_stats(farmers: List[dict]) -> dict:
    """Group per-farmer revenue by state and by country."""
    by_state: Dict[str, dict] = {}
    by_country: Dict[str, dict] = {}

    def bump(bucket: Dict[str, dict], key: str, farmer: dict):
        stat = bucket.setdefault(key, {
            "location": key,
            "total_orders": 0,
            "total_revenue": 0.0,
            "unique_farmers": 0,
        })
        stat["total_orders"] += farmer["total_orders"]
        stat["total_revenue"] += farmer["total_revenue"]
        stat["unique_farmers"] += 1

    for farmer in farmers:
        if farmer.get("state"):
            bump(by_state, f"{farmer['state']}, {farmer.get('country') or 'Unknown'}", farmer)
        if farmer.get("country"):
            bump(by_country, farmer["country"], farmer)

    def ranked(bucket):
        return sorted(bucket.values(), key=lambda s: s["total_revenue"], reverse=True)

    return {"by_state": ranked(by_state), "by_country": ranked(by_country)}


# -----------------------------------------------------
# Featured sellers / cover images
# -----------------------------------------------------
def fetch_featured_sellers(client) -> List[dict]:
    result = (
        client.table("featured_sellers_with_details")
        .select("*")
        .order("priority", desc=True)
        .order("featured_at", desc=True)
        .execute()
    )
    return result.data or []


def fetch_cover_images(client) -> List[dict]:
    result = (
        client.table("cover_images")
        .select("*")
        .order("created_at", desc=True)
        .execute()
    )
    return result.data or []


def fetch_active_cover_image(client) -> Optional[dict]:
    result = (
        client.table("cover_images")
        .select("*")
        .eq("is_active", True)
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None
