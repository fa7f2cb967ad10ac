"""Feature modules for the Namesdao wallet engine.

This package contains self-contained feature modules organized by functionality:

- pricing: Tier resolution, pricing cache and totals
- payment: Funding wallet selection
- registration: Registrar API, private memos and registration
- names: Owned name aggregation and lifecycle status
- website: .xch.limo website setup workflow
"""

from namesdao_wallet.features import names
from namesdao_wallet.features import payment
from namesdao_wallet.features import pricing
from namesdao_wallet.features import registration
from namesdao_wallet.features import website

__all__ = ["names", "payment", "pricing", "registration", "website"]
