"""
SEO copy template banks.

Every bank holds str.format templates. Placeholders:
  {city}       display name            {count}      plan count
  {rate}       lowest rate, verbatim   {territory}  TDSP name
  {filter}     one filter's name       {filters}    joined filter names

City and multi-filter banks have exactly VARIANT_COUNT entries so the
variation index maps 1:1. Shorter banks (per-token bodies, footers) wrap
around with pick().
"""

from __future__ import annotations

from typing import Sequence

VARIANT_COUNT = 5


def pick(bank: Sequence[str], variation: int) -> str:
    return bank[variation % len(bank)]


# ---------------------------------------------------------------------------
# Titles
# ---------------------------------------------------------------------------

CITY_TITLES: tuple[str, ...] = (
    "Find Your Best Electricity Rate in {city} | {count} Quality Plans",
    "{city} Electricity That Actually Fits | {count} Clear Options",
    "Moving to {city}? Compare {count} Electricity Plans Before You Switch",
    "{city} Electricity Plans From {rate}¢/kWh | {count} Honest Rates",
    "{city} Electricity Made Simple | {count} Plans From Licensed Providers",
)

SINGLE_FILTER_TITLES: dict[str, tuple[str, ...]] = {
    "12-month": (
        "{count} Best 12-Month Electricity Plans in {city} | Fixed Rate",
        "12-Month Electricity Plans {city} | {count} Options From {rate}¢",
        "Annual Power Plans in {city} | {count} 12-Month Contracts",
        "{city} 1-Year Electricity Plans | {count} Fixed Rate Options",
        "Best Annual Electricity Plans {city} | {count} One-Year Options",
    ),
    "24-month": (
        "{count} Best 24-Month Electricity Plans in {city} | 2-Year Fixed",
        "24-Month Power Plans {city} | {count} Two-Year Contracts",
        "{city} 2-Year Electricity | {count} Long-Term Fixed Rates",
        "Two-Year Electricity Plans in {city} | {count} 24-Month Terms",
        "24-Month Electricity Plans {city} | {count} Long-Term Savings",
    ),
    "fixed-rate": (
        "{count} Fixed Rate Electricity Plans in {city} | Lock Your Rate",
        "Fixed Rate Power Plans {city} | {count} Options From {rate}¢",
        "{city} Fixed Electricity | {count} Stable Rate Plans",
        "Lock-In Electricity Rates {city} | {count} Fixed Price Plans",
        "Predictable Power Bills {city} | {count} Fixed Rate Options",
    ),
    "variable-rate": (
        "{count} Variable Rate Electricity Plans in {city} | Market Rates",
        "Variable Electricity {city} | {count} Flexible Rate Options",
        "{city} Market Rate Power | {count} Variable Plans",
        "Flexible Electricity Rates {city} | {count} Variable Options",
        "{city} Variable Power Plans | {count} Market-Based Rates",
    ),
    "green-energy": (
        "{count} Green Energy Plans in {city} | 100% Renewable Power",
        "100% Green Electricity {city} | {count} Eco-Friendly Plans",
        "{city} Renewable Energy | {count} 100% Green Power Plans",
        "Clean Energy Plans {city} | {count} Solar & Wind Power",
        "Renewable Power Plans {city} | {count} Eco-Friendly Options",
    ),
    "prepaid": (
        "{count} Prepaid Electricity Plans in {city} | No Credit Check",
        "{city} Pay-As-You-Go Power | {count} Prepaid Plans",
        "Prepaid Power Plans {city} | {count} No Deposit Required",
        "{city} No Credit Check Electricity | {count} Prepaid Options",
        "Instant Electricity Connection {city} | {count} Prepaid Plans",
    ),
    "no-deposit": (
        "{count} No Deposit Electricity Plans in {city} | Save $100-$300",
        "{city} Zero Deposit Power | {count} No Upfront Cost Plans",
        "No Deposit Required Electricity {city} | {count} Plans Available",
        "{city} Skip the Deposit | {count} No Deposit Power Plans",
        "Deposit-Free Power Plans {city} | {count} No Upfront Fees",
    ),
}

GENERIC_SINGLE_TITLES: tuple[str, ...] = (
    "{count} {filter} Plans in {city} | Compare & Switch",
    "{filter} Electricity in {city} | {count} Plans From {rate}¢",
    "{city} {filter} Power Plans | {count} Options",
    "Compare {count} {filter} Electricity Plans in {city}",
    "{city} {filter} Electricity | {count} Licensed Providers",
)

MULTI_FILTER_TITLES: tuple[str, ...] = (
    "{count} {filters} Plans in {city}",
    "{filters} Electricity in {city} | {count} Matching Plans",
    "{city} {filters} Power | Compare {count} Plans",
    "Best {filters} Plans in {city} | From {rate}¢/kWh",
    "{city} Electricity: {filters} | {count} Options",
)


# ---------------------------------------------------------------------------
# Descriptions & headings
# ---------------------------------------------------------------------------

CITY_DESCRIPTIONS: tuple[str, ...] = (
    "Compare {count} electricity plans in {city} with rates from {rate}¢/kWh. "
    "Power is delivered by {territory} whichever provider you pick.",
    "{city} residents can choose from {count} plans starting at {rate}¢/kWh. "
    "See every fee upfront and switch online.",
    "Shopping for power in {city}? {count} plans, rates from {rate}¢/kWh, "
    "same reliable {territory} delivery.",
    "Find a {city} electricity plan that fits. {count} options from licensed "
    "providers, lowest rate {rate}¢/kWh.",
    "{count} {city} electricity plans side by side. Rates from {rate}¢/kWh "
    "with no hidden fees.",
)

FILTERED_DESCRIPTIONS: tuple[str, ...] = (
    "Compare {count} {filters} electricity plans in {city} from {rate}¢/kWh. "
    "Delivered by {territory}.",
    "{count} {filters} plans available in {city}, starting at {rate}¢/kWh. "
    "Compare terms and switch online.",
    "Looking for {filters} electricity in {city}? {count} plans from "
    "{rate}¢/kWh with all fees disclosed.",
    "{city} {filters} electricity: {count} plans, lowest rate {rate}¢/kWh, "
    "reliable {territory} delivery.",
    "See {count} {filters} electricity plans for {city} homes. Rates from "
    "{rate}¢/kWh.",
)

CITY_HEADINGS: tuple[str, ...] = (
    "Electricity Plans in {city}",
    "Compare {city} Electricity Rates",
    "{city} Electricity Providers & Plans",
    "Choose Your {city} Electricity Plan",
    "{count} Electricity Plans for {city}",
)

FILTERED_HEADINGS: tuple[str, ...] = (
    "{filters} Electricity Plans in {city}",
    "Compare {filters} Plans in {city}",
    "{city} {filters} Electricity",
    "{count} {filters} Plans for {city}",
    "Find {filters} Electricity in {city}",
)


# ---------------------------------------------------------------------------
# Body & footer HTML
# ---------------------------------------------------------------------------

CITY_BODIES: tuple[str, ...] = (
    "<p>{city} residents deserve clear electricity choices. We have organized "
    "{count} options from licensed electricity companies, with rates from "
    "{rate}¢/kWh.</p><p>{territory} handles power delivery throughout the "
    "{city} area, so service stays the same whichever provider you choose.</p>",
    "<p>Living in {city} means you can choose your electricity provider. With "
    "{count} plans available and rates from {rate}¢/kWh, there is an option "
    "for most budgets.</p><p>{territory} maintains the lines, so switching "
    "changes your bill, not your reliability.</p>",
    "<p>Choosing electricity for your {city} home does not have to be "
    "complicated. Compare {count} plans with rates from {rate}¢/kWh.</p>"
    "<p>{territory} delivers the power; you pick the retail company.</p>",
    "<p>{count} electricity plans are available for {city} residents, with "
    "rates from {rate}¢/kWh.</p><p>{territory} keeps the lights on while "
    "retail providers compete on price and features.</p>",
    "<p>Take control of your electricity costs in {city}. {count} plans from "
    "licensed providers, lowest rate {rate}¢/kWh, no hidden fees.</p>"
    "<p>Outages and lines are still handled by {territory}.</p>",
)

SINGLE_FILTER_BODIES: dict[str, tuple[str, ...]] = {
    "12-month": (
        "<p>Secure predictable electricity rates in {city} with {count} 12-month "
        "contract options from {rate}¢/kWh. Annual plans balance rate stability "
        "and flexibility.</p><p>Every plan is delivered over {territory}'s grid "
        "with all fees disclosed upfront.</p>",
        "<p>Lock in stable pricing for your {city} home with {count} 12-month "
        "plans from {rate}¢/kWh, and stay free to switch after one year.</p>"
        "<p>Service runs through {territory}'s distribution network.</p>",
    ),
    "green-energy": (
        "<p>Power your {city} home with renewable energy through {count} 100% "
        "green plans from {rate}¢/kWh, backed by Texas wind and solar.</p>"
        "<p>{territory} handles delivery, so service quality is unchanged.</p>",
        "<p>{count} green energy plans are available in {city} from "
        "{rate}¢/kWh, matched with Texas renewable generation.</p><p>All plans "
        "are delivered through {territory}'s grid.</p>",
    ),
}

GENERIC_FILTERED_BODIES: tuple[str, ...] = (
    "<p>Find the best {filters} electricity plans in {city} with {count} "
    "options from {rate}¢/kWh.</p><p>All plans are delivered through "
    "{territory} with transparent pricing.</p>",
    "<p>{count} {filters} plans are available in {city}, starting at "
    "{rate}¢/kWh.</p><p>{territory} delivers the power whichever provider you "
    "choose.</p>",
    "<p>Compare {count} {filters} electricity plans for {city} homes, lowest "
    "rate {rate}¢/kWh.</p><p>Contract terms and fees are shown upfront.</p>",
    "<p>{city} households can pick from {count} {filters} plans with rates "
    "from {rate}¢/kWh.</p><p>Delivery and outages stay with {territory}.</p>",
    "<p>Narrowed to {filters}: {count} plans in {city} from {rate}¢/kWh.</p>"
    "<p>Switch online; {territory} keeps delivering your power.</p>",
)

FOOTERS: tuple[str, ...] = (
    '<div class="local-info"><h3>About Electricity Service in {city}</h3><p>{city} '
    "is part of the deregulated Texas electricity market, served by {territory}.</p></div>",
    '<div class="local-info"><h3>Electricity Market Information: {city}</h3><p>{city} '
    "customers choose their retail provider while {territory} maintains the grid.</p></div>",
    '<div class="local-info"><h3>{city} Power Market Overview</h3><p>Retail providers '
    "compete for {city} customers; {territory} ensures reliable distribution.</p></div>",
)
