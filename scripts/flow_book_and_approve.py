#!/usr/bin/env python3
"""
Complete booking flow script: quote, book, approve, cancel.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Tokens come from the identity provider. For local runs mint them with
scripts/issue_dev_token.py.

Usage:
    python scripts/flow_book_and_approve.py --listing-id <UUID> \
        --renter-token <JWT> --host-token <JWT> \
        --start-date 2026-04-01 --end-date 2026-04-04 --capacity 10

Flow:
    1. Quote capacity and price
    2. Create booking (renter)
    3. List host requests
    4. Approve booking (host)
    5. Cancel booking (renter), unless --keep
"""

import argparse
import json
import sys

import httpx

BASE_URL = "http://localhost:8000"


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    headers = {"Authorization": f"Bearer {token}"}
    url = f"{BASE_URL}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, timeout=10.0, follow_redirects=True)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    elif method == "PUT":
        response = httpx.put(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Complete booking approval flow")
    parser.add_argument("--listing-id", required=True, help="Listing UUID")
    parser.add_argument("--renter-token", required=True, help="Renter access token")
    parser.add_argument("--host-token", required=True, help="Listing owner access token")
    parser.add_argument("--start-date", required=True, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end-date", required=True, help="End date (YYYY-MM-DD)")
    parser.add_argument("--capacity", default="10", help="Cubic feet to reserve")
    parser.add_argument("--keep", action="store_true", help="Skip the cancel step")
    args = parser.parse_args()

    request_body = {
        "listingId": args.listing_id,
        "capacityRequired": args.capacity,
        "startDate": args.start_date,
        "endDate": args.end_date,
    }

    # Step 1: Quote
    print_step(1, "Quote capacity and price")
    quote_result = api_request(args.renter_token, "POST", "/api/v1/bookings/calculate", request_body)
    if not print_result(quote_result):
        sys.exit(1)

    if not quote_result["data"].get("available"):
        print(f"ERROR: Listing not available - {quote_result['data'].get('unavailableReason')}")
        sys.exit(1)

    print(f"\nQuote Summary:")
    print(f"  Remaining:   {quote_result['data']['remainingCapacity']} cu ft")
    print(f"  Days:        {quote_result['data']['days']}")
    print(f"  Total Price: {quote_result['data']['totalPrice']}")

    # Step 2: Create booking
    print_step(2, "Create booking (renter)")
    booking_result = api_request(args.renter_token, "POST", "/api/v1/bookings", request_body)
    if not print_result(booking_result, ["id", "capacityRequired", "totalPrice", "status", "paymentStatus", "paymentId"]):
        sys.exit(1)

    booking_id = booking_result["data"]["id"]
    print(f"\nBooking created: {booking_id}")

    # Step 3: Host requests
    print_step(3, "List booking requests (host)")
    requests_result = api_request(args.host_token, "GET", "/api/v1/bookings/requests")
    if not print_result(requests_result, ["total"]):
        sys.exit(1)

    # Step 4: Approve
    print_step(4, "Approve booking (host)")
    approve_result = api_request(
        args.host_token, "PUT", f"/api/v1/bookings/{booking_id}/status", {"status": "approved"}
    )
    if not print_result(approve_result, ["id", "status", "paymentStatus", "approvedAt"]):
        sys.exit(1)
    print("\nBooking APPROVED")

    if args.keep:
        print("\n" + "="*60)
        print("FLOW COMPLETE (booking kept)")
        print("="*60)
        return

    # Step 5: Cancel
    print_step(5, "Cancel booking (renter)")
    cancel_result = api_request(args.renter_token, "PUT", f"/api/v1/bookings/{booking_id}/cancel")
    if not print_result(cancel_result, ["id", "status", "paymentStatus", "cancelledAt"]):
        sys.exit(1)
    print("\nBooking CANCELLED")

    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)
    print(f"Booking:     {booking_id}")
    print(f"Total Price: {booking_result['data']['totalPrice']}")


if __name__ == "__main__":
    main()
