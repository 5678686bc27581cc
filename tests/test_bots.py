import pytest

from bots import AdaptiveBot, HeuristicBot, RandomBot, make_bot
from bots.adaptive import TrickPolicy, analyze_hand
from bots.base import BotContext, PlayedCard, preferred_suit
from bots.tracking import CardTracker
from engine.bidding import Bid
from engine.cards import Card, Rank, Suit
from engine.mechanics import legal_moves
from engine.trick import Trick


def context(
    hand,
    *,
    position=0,
    contract=None,
    trump=None,
    leader=None,
    trick=(),
    played=(),
    scores=(0, 0),
    round_points=(0, 0),
    allow_partner_overbid=False,
):
    current = Trick(leader=leader if leader is not None else position, plays=list(trick))
    return BotContext(
        position=position,
        hand=tuple(hand),
        legal_moves=tuple(legal_moves(hand, current)),
        deck_variant="36",
        contract=contract,
        trump=trump,
        trick_leader=current.leader,
        trick=tuple(trick),
        played=tuple(played),
        known_discards=(),
        round_points=round_points,
        scores=scores,
        score_target=200,
        passed=frozenset(),
        bidding_teams=frozenset(),
        allow_partner_overbid=allow_partner_overbid,
    )


def middling_hand():
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.TEN, Suit.SPADES),
        Card(Rank.KING, Suit.SPADES),
        Card(Rank.QUEEN, Suit.SPADES),
        Card(Rank.ACE, Suit.HEARTS),
        Card(Rank.TEN, Suit.HEARTS),
        Card(Rank.FIVE, Suit.CLUBS),
        Card(Rank.SEVEN, Suit.DIAMONDS),
        Card(Rank.NINE, Suit.DIAMONDS),
    ]


def strong_hand():
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.TEN, Suit.SPADES),
        Card(Rank.FIVE, Suit.SPADES),
        Card(Rank.KING, Suit.SPADES),
        Card(Rank.QUEEN, Suit.SPADES),
        Card(Rank.ACE, Suit.HEARTS),
        Card(Rank.TEN, Suit.HEARTS),
        Card(Rank.ACE, Suit.CLUBS),
        Card(Rank.TEN, Suit.CLUBS),
    ]


def weak_hand():
    return [
        Card(Rank.SEVEN, Suit.SPADES),
        Card(Rank.EIGHT, Suit.SPADES),
        Card(Rank.NINE, Suit.HEARTS),
        Card(Rank.JACK, Suit.HEARTS),
        Card(Rank.SEVEN, Suit.CLUBS),
        Card(Rank.EIGHT, Suit.CLUBS),
        Card(Rank.FIVE, Suit.DIAMONDS),
        Card(Rank.TEN, Suit.DIAMONDS),
        Card(Rank.NINE, Suit.DIAMONDS),
    ]


def test_registry_builds_each_skill():
    assert isinstance(make_bot("easy"), HeuristicBot)
    assert make_bot("hard").bonus == 15
    assert isinstance(make_bot("adaptive"), AdaptiveBot)
    assert isinstance(make_bot("random", seed=1), RandomBot)
    with pytest.raises(ValueError):
        make_bot("grandmaster")


def test_heuristic_opens_on_middling_hand():
    decision = HeuristicBot("medium").make_bid(context(middling_hand()))
    assert decision is not None
    assert decision.points == 50
    assert decision.suit is Suit.SPADES


def test_heuristic_passes_on_weak_hand():
    assert HeuristicBot("hard").make_bid(context(weak_hand())) is None


def test_heuristic_overcalls_by_one_step():
    standing = Bid(position=1, points=60, suit=Suit.HEARTS)
    decision = HeuristicBot("medium").make_bid(context(strong_hand(), contract=standing))
    assert decision.points == 65


def test_heuristic_respects_theoretical_maximum():
    standing = Bid(position=1, points=55, suit=Suit.HEARTS)
    assert HeuristicBot("medium").make_bid(context(middling_hand(), contract=standing)) is None


def test_bots_never_outbid_partner():
    standing = Bid(position=2, points=50, suit=Suit.HEARTS)
    ctx = context(strong_hand(), contract=standing)
    assert HeuristicBot("hard").make_bid(ctx) is None
    assert AdaptiveBot().make_bid(ctx) is None
    assert all(RandomBot(seed).make_bid(ctx) is None for seed in range(20))


def test_heuristic_follows_with_lowest_winner():
    hand = [Card(Rank.ACE, Suit.HEARTS), Card(Rank.SEVEN, Suit.HEARTS), Card(Rank.FIVE, Suit.SPADES)]
    ctx = context(hand, position=0, leader=3, trick=[(3, Card(Rank.KING, Suit.HEARTS))], trump=Suit.CLUBS)
    assert HeuristicBot().play_card(ctx) == Card(Rank.ACE, Suit.HEARTS)

    losing = context(
        [Card(Rank.KING, Suit.HEARTS), Card(Rank.SEVEN, Suit.HEARTS)],
        position=0,
        leader=3,
        trick=[(3, Card(Rank.ACE, Suit.HEARTS))],
    )
    assert HeuristicBot().play_card(losing) == Card(Rank.SEVEN, Suit.HEARTS)


def test_heuristic_discards_cheapest_non_trump():
    hand = strong_hand() + [
        Card(Rank.SEVEN, Suit.DIAMONDS),
        Card(Rank.EIGHT, Suit.DIAMONDS),
        Card(Rank.JACK, Suit.CLUBS),
        Card(Rank.NINE, Suit.HEARTS),
    ]
    decision = HeuristicBot().choose_discards(context(hand, trump=Suit.SPADES))
    assert len(decision.cards) == 4
    assert all(card.suit is not Suit.SPADES for card in decision.cards)
    assert all(card.point_value() == 0 for card in decision.cards)
    assert decision.suit is None


def test_preferred_suit_breaks_ties_by_points():
    hand = [
        Card(Rank.SEVEN, Suit.CLUBS),
        Card(Rank.EIGHT, Suit.CLUBS),
        Card(Rank.ACE, Suit.DIAMONDS),
        Card(Rank.NINE, Suit.DIAMONDS),
    ]
    assert preferred_suit(hand) is Suit.DIAMONDS


def test_hand_analysis_adds_trump_and_distribution_bonuses():
    analysis = analyze_hand(strong_hand())
    assert analysis.suit is Suit.SPADES
    assert analysis.card_points == 65
    assert analysis.trump_bonus == 15
    assert analysis.distribution_bonus == 15
    assert analysis.adjusted == 95


def test_adaptive_bid_is_legal_and_capped():
    decision = AdaptiveBot().make_bid(context(strong_hand(), scores=(120, 150)))
    assert decision is not None
    assert 50 <= decision.points <= 100
    assert decision.points % 5 == 0


def test_adaptive_feeds_partner_who_is_winning():
    hand = [Card(Rank.TEN, Suit.HEARTS), Card(Rank.SEVEN, Suit.HEARTS), Card(Rank.FIVE, Suit.CLUBS)]
    trick = [(1, Card(Rank.NINE, Suit.HEARTS)), (2, Card(Rank.ACE, Suit.HEARTS)), (3, Card(Rank.EIGHT, Suit.HEARTS))]
    ctx = context(hand, position=0, leader=1, trick=trick, trump=Suit.SPADES)
    bot = AdaptiveBot()
    assert bot.classify(ctx, CardTracker.from_context(ctx)) is TrickPolicy.SIGNAL_PARTNER
    assert bot.play_card(ctx) == Card(Rank.TEN, Suit.HEARTS)


def test_adaptive_takes_points_from_opponents():
    hand = [Card(Rank.KING, Suit.HEARTS), Card(Rank.SEVEN, Suit.HEARTS), Card(Rank.ACE, Suit.HEARTS)]
    trick = [(3, Card(Rank.TEN, Suit.HEARTS))]
    ctx = context(hand, position=0, leader=3, trick=trick, trump=Suit.SPADES)
    bot = AdaptiveBot()
    assert bot.classify(ctx, CardTracker.from_context(ctx)) is TrickPolicy.WIN_TRICK
    assert bot.play_card(ctx) == Card(Rank.KING, Suit.HEARTS)


def test_adaptive_last_seat_ducks_a_cheap_trick():
    hand = [Card(Rank.KING, Suit.CLUBS), Card(Rank.SEVEN, Suit.CLUBS)]
    trick = [
        (1, Card(Rank.NINE, Suit.CLUBS)),
        (2, Card(Rank.EIGHT, Suit.CLUBS)),
        (3, Card(Rank.JACK, Suit.CLUBS)),
    ]
    ctx = context(hand, position=0, leader=1, trick=trick, trump=Suit.SPADES)
    bot = AdaptiveBot()
    assert bot.classify(ctx, CardTracker.from_context(ctx)) is TrickPolicy.LOSE_TRICK
    assert bot.play_card(ctx) == Card(Rank.SEVEN, Suit.CLUBS)


def test_adaptive_redeclares_trump_to_longer_suit():
    hand = [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.SEVEN, Suit.SPADES),
        Card(Rank.ACE, Suit.CLUBS),
        Card(Rank.KING, Suit.CLUBS),
        Card(Rank.QUEEN, Suit.CLUBS),
        Card(Rank.JACK, Suit.CLUBS),
        Card(Rank.TEN, Suit.CLUBS),
        Card(Rank.NINE, Suit.CLUBS),
        Card(Rank.SIX, Suit.HEARTS),
        Card(Rank.SEVEN, Suit.HEARTS),
        Card(Rank.EIGHT, Suit.DIAMONDS),
        Card(Rank.SIX, Suit.DIAMONDS),
        Card(Rank.NINE, Suit.HEARTS),
    ]
    decision = AdaptiveBot().choose_discards(context(hand, trump=Suit.SPADES))
    assert decision.suit is Suit.CLUBS
    assert len(set(decision.cards)) == 4
    assert all(card.suit is not Suit.CLUBS for card in decision.cards)


def test_tracker_infers_voids_and_unseen_cards():
    hand = [Card(Rank.ACE, Suit.HEARTS)]
    played = [
        PlayedCard(position=1, card=Card(Rank.KING, Suit.HEARTS), led_suit=Suit.HEARTS),
        PlayedCard(position=2, card=Card(Rank.SEVEN, Suit.CLUBS), led_suit=Suit.HEARTS),
    ]
    tracker = CardTracker.from_context(context(hand, played=played))
    assert tracker.is_void(2, Suit.HEARTS)
    assert not tracker.is_void(1, Suit.HEARTS)
    assert len(tracker.unseen()) == 33
    assert Card(Rank.KING, Suit.HEARTS) not in tracker.remaining_high_cards(Suit.HEARTS)
    assert tracker.is_master(Card(Rank.ACE, Suit.HEARTS))
