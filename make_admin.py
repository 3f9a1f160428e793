# make_admin.py
# Usage: python make_admin.py <email | phone | member_id> [tier]
#
# Admin access follows the membership tier (vip / lifetime), so promoting a
# member means raising their tier.

import sys

from sqlalchemy import or_

from blueprints.member_helpers import refresh_qr_code
from extensions import db
from models import ELEVATED_TIERS, Member


def promote_member(identifier, tier="lifetime"):
    if tier not in ELEVATED_TIERS:
        raise ValueError(f"Tier must be one of: {', '.join(ELEVATED_TIERS)}")

    member = Member.query.filter(
        or_(Member.email == identifier.lower(),
            Member.phone == identifier,
            Member.member_id == identifier)
    ).first()
    if not member:
        raise LookupError(f"No member matches {identifier!r}")

    print(f"Found member id={member.id} ({member.member_id}). Promoting to {tier}...")
    changed = {"membership_type"} if member.membership_type != tier else set()
    member.membership_type = tier
    member.is_active = True
    refresh_qr_code(member, changed)
    db.session.commit()

    print(f"Member {member.member_id} now holds the {tier} tier and passes the admin gate.")
    return member


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python make_admin.py <email | phone | member_id> [tier]")
        sys.exit(1)

    from app import create_app

    app = create_app()
    with app.app_context():
        promote_member(sys.argv[1], *sys.argv[2:3])
