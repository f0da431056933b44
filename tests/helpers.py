"""Payload builders and a routing fake for the API-Football client."""

from fxsync.api import ApiFootballError


class FakeClient:
    """
    Stand-in for ApiFootballClient. ``handlers`` maps an endpoint path to a
    callable taking the params dict; it returns the ``response`` list or raises.
    """

    def __init__(self, handlers=None):
        self.handlers = dict(handlers or {})
        self.calls = []

    def get(self, path, params=None):
        params = dict(params or {})
        self.calls.append((path, params))
        handler = self.handlers.get(path)
        if handler is None:
            return {"errors": [], "response": []}
        return {"errors": [], "response": handler(params)}

    def get_response(self, path, params=None):
        return self.get(path, params=params)["response"]

    def paths(self):
        return [path for path, _ in self.calls]


def failing(message="boom"):
    def _handler(params):
        raise ApiFootballError(message)

    return _handler


def league_payload(league_id, seasons):
    return [{"league": {"id": league_id, "name": f"League {league_id}"}, "seasons": seasons}]


def seasons_handler(years_by_league, failing_leagues=()):
    def _handler(params):
        league_id = params["id"]
        if league_id in failing_leagues:
            raise ApiFootballError(f"league {league_id} unavailable")
        year = years_by_league.get(league_id)
        if year is None:
            return league_payload(league_id, [])
        return league_payload(league_id, [{"year": year - 1, "current": False}, {"year": year, "current": True}])

    return _handler


def fixture_record(fixture_id, league_id, kickoff, season=2024, status="NS", home="Home FC", away="Away FC"):
    return {
        "fixture": {
            "id": fixture_id,
            "date": kickoff,
            "status": {"short": status, "long": "Not Started"},
            "venue": {"id": 1, "name": "Main Ground"},
        },
        "league": {"id": league_id, "name": f"League {league_id}", "season": season},
        "teams": {
            "home": {"id": fixture_id * 10 + 1, "name": home},
            "away": {"id": fixture_id * 10 + 2, "name": away},
        },
        "goals": {"home": None, "away": None},
    }


def bookmaker(bookmaker_id, home, draw, away, market="Match Winner"):
    return {
        "id": bookmaker_id,
        "name": f"Book {bookmaker_id}",
        "bets": [
            {
                "id": 1,
                "name": market,
                "values": [
                    {"value": "Home", "odd": str(home)},
                    {"value": "Draw", "odd": str(draw)},
                    {"value": "Away", "odd": str(away)},
                ],
            }
        ],
    }


def odds_payload(fixture_id, bookmakers):
    return [{"fixture": {"id": fixture_id}, "bookmakers": bookmakers}]


def standings_payload(league_id, season, table, name=None):
    return [
        {
            "league": {
                "id": league_id,
                "name": name or f"League {league_id}",
                "season": season,
                "standings": [table],
            }
        }
    ]


def standing_entry(team_id, rank, points, played=10, win=5, draw=3, lose=2):
    return {
        "rank": rank,
        "team": {"id": team_id, "name": f"Team {team_id}"},
        "points": points,
        "all": {"played": played, "win": win, "draw": draw, "lose": lose},
    }
