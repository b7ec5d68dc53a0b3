from booking_engine.config import ATTRACTION_TICKETS_ENABLED
from booking_engine.pricing.models import PriceTable, DEFAULT_PRICING

class SessionConfig:
    """
    Configuration chargée une fois au démarrage d'une session d'achat puis injectée dans le tunnel.
    - price_table: grille de prix figée pour l'achat en cours
    - purchases_enabled: interrupteur global de la vente (fail-open)
    - attractions_enabled: vente des billets d'attraction en ligne
    """
    def __init__(
        self,
        price_table: PriceTable = DEFAULT_PRICING,
        purchases_enabled: bool = True,
        attractions_enabled: bool = ATTRACTION_TICKETS_ENABLED,
    ):
        self.price_table = price_table
        self.purchases_enabled = purchases_enabled
        self.attractions_enabled = attractions_enabled

    def with_price_table(self, price_table: PriceTable) -> "SessionConfig":
        return SessionConfig(price_table, self.purchases_enabled, self.attractions_enabled)
