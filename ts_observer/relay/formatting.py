"""Human-readable rendering of relay notifications (Telegram HTML mode)."""

from __future__ import annotations

import html
from datetime import datetime

from .messages import EnterNotification, LeftNotification, NotificationMessage

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# ISO 3166-1 alpha-2
_ISO_COUNTRIES = frozenset(
    """
    AD AE AF AG AI AL AM AO AQ AR AS AT AU AW AX AZ BA BB BD BE BF BG BH BI BJ
    BL BM BN BO BQ BR BS BT BV BW BY BZ CA CC CD CF CG CH CI CK CL CM CN CO CR
    CU CV CW CX CY CZ DE DJ DK DM DO DZ EC EE EG EH ER ES ET FI FJ FK FM FO FR
    GA GB GD GE GF GG GH GI GL GM GN GP GQ GR GS GT GU GW GY HK HM HN HR HT HU
    ID IE IL IM IN IO IQ IR IS IT JE JM JO JP KE KG KH KI KM KN KP KR KW KY KZ
    LA LB LC LI LK LR LS LT LU LV LY MA MC MD ME MF MG MH MK ML MM MN MO MP MQ
    MR MS MT MU MV MW MX MY MZ NA NC NE NF NG NI NL NO NP NR NU NZ OM PA PE PF
    PG PH PK PL PM PN PR PS PT PW PY QA RE RO RS RU RW SA SB SC SD SE SG SH SI
    SJ SK SL SM SN SO SR SS ST SV SX SY SZ TC TD TF TG TH TJ TK TL TM TN TO TR
    TT TV TW TZ UA UG UM US UY UZ VA VC VE VG VI VN VU WF WS YE YT ZA ZM ZW
    EU UN
    """.split()
)
_REGIONAL_INDICATOR_A = 0x1F1E6


def now_timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def country_flag(code: str) -> str | None:
    """Flag emoji for a 2-letter country code, or None if unknown."""
    upper = code.upper()
    if upper not in _ISO_COUNTRIES:
        return None
    return "".join(chr(_REGIONAL_INDICATOR_A + ord(ch) - ord("A")) for ch in upper)


def _esc(value: str) -> str:
    return html.escape(value, quote=False)


def format_notification(message: NotificationMessage) -> str:
    if isinstance(message, EnterNotification):
        country = country_flag(message.country) or _esc(message.country)
        return (
            f"[{message.timestamp}] <b>{_esc(message.nickname)}</b>"
            f"(<code>{_esc(message.unique_identifier)}</code>:{message.client_id})"
            f"[{country}] joined"
        )
    if isinstance(message, LeftNotification):
        base = f"[{message.timestamp}] <b>{_esc(message.nickname)}</b>({message.client_id}) left"
        if not message.reason:
            return base
        return f"{base} ({_esc(message.reason)})"
    raise ValueError(f"Cannot format {type(message).__name__}")
