"""Weather lookup web app: FastAPI backend plus a single-page UI."""

import threading

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from weatherapp.config.defaults import DEFAULT_CONFIG_PATH
from weatherapp.config.loader import load_config
from weatherapp.models.common import utc_now_iso
from weatherapp.reporting.formatters import favorite_to_dict, state_to_dict
from weatherapp.session import WeatherSession, build_session

CONFIG_PATH = DEFAULT_CONFIG_PATH

app = FastAPI(title="Weather App", version="0.1.0")

_session: WeatherSession | None = None
_session_lock = threading.Lock()


def configure(session: WeatherSession | None) -> None:
    """Install the session the endpoints operate on."""
    global _session
    with _session_lock:
        _session = session


def get_session() -> WeatherSession:
    global _session
    if _session is None:
        # Endpoints run on a thread pool; build the session exactly once.
        with _session_lock:
            if _session is None:
                _session = build_session(
                    load_config(CONFIG_PATH), check_same_thread=False
                )
    return _session


class SearchRequest(BaseModel):
    city: str


# ── Query endpoints ─────────────────────────────────────────────


@app.get("/api/state")
def get_state():
    """Current query state: status, snapshot or error."""
    return state_to_dict(get_session().state)


@app.post("/api/search")
def search(req: SearchRequest):
    """Submit the query form. Blank input leaves the state untouched."""
    session = get_session()
    state = session.submit(req.city)
    accepted = state is not None
    return {"accepted": accepted, "state": state_to_dict(session.state)}


# ── Favorites endpoints ─────────────────────────────────────────


@app.get("/api/favorites")
def list_favorites():
    return [favorite_to_dict(f) for f in get_session().list_favorites()]


@app.post("/api/favorites")
def add_favorite():
    """Bookmark the city currently on display."""
    fav = get_session().add_favorite()
    if fav is None:
        return {"status": "no_change", "favorite": None}
    return {"status": "added", "favorite": favorite_to_dict(fav)}


@app.delete("/api/favorites/{fav_id}")
def remove_favorite(fav_id: str):
    removed = get_session().remove_favorite(fav_id)
    return {"status": "removed" if removed else "no_change"}


@app.post("/api/favorites/{fav_id}/open")
def open_favorite(fav_id: str):
    """Look up the weather for a bookmarked city."""
    state = get_session().open_favorite(fav_id)
    if state is None:
        raise HTTPException(404, f"Favorite {fav_id} not found")
    return state_to_dict(state)


@app.get("/api/health")
def get_health():
    session = get_session()
    return {
        "status": "ok",
        "favorites": len(session.favorites),
        "timestamp": utc_now_iso(),
    }


# ── Serve page ──────────────────────────────────────────────────


@app.get("/")
def serve_page():
    return HTMLResponse(PAGE_HTML)


PAGE_HTML = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Weather App</title>
<style>
  body { font-family: sans-serif; max-width: 48rem; margin: 2rem auto; }
  .error { color: #b91c1c; background: #fef2f2; padding: .75rem; }
  .card { border: 1px solid #ddd; border-radius: .5rem; padding: 1rem; margin: 1rem 0; }
  .temp { font-size: 2rem; font-weight: bold; }
  #favorites li { margin: .25rem 0; }
</style>
</head>
<body>
<h1>Weather App</h1>
<form id="search">
  <input id="city" type="text" placeholder="Enter city name">
  <button id="submit" type="submit">Search</button>
</form>
<div id="error" class="error" hidden></div>
<div id="weather" class="card" hidden>
  <h2><span id="name"></span> <small id="country"></small></h2>
  <img id="icon" alt="">
  <div class="temp" id="temp"></div>
  <div id="desc"></div>
  <p>Humidity: <span id="humidity"></span></p>
  <p>Feels like: <span id="feels"></span></p>
  <button id="star" title="Add to favorites">&#9733; Add to favorites</button>
</div>
<h3>Favorite Cities</h3>
<ul id="favorites"></ul>
<script>
const $ = (id) => document.getElementById(id);

function render(state) {
  $("submit").disabled = state.loading;
  $("submit").textContent = state.loading ? "Searching..." : "Search";
  $("error").hidden = !state.error;
  $("error").textContent = state.error || "";
  const s = state.snapshot;
  $("weather").hidden = !s;
  if (s) {
    $("name").textContent = s.location_name;
    $("country").textContent = s.country;
    $("icon").src = s.icon_url;
    $("icon").alt = s.description;
    $("temp").textContent = s.temperature_display;
    $("desc").textContent = s.description;
    $("humidity").textContent = s.humidity_display;
    $("feels").textContent = s.feels_like_display;
  }
}

async function loadFavorites() {
  const favs = await (await fetch("/api/favorites")).json();
  const list = $("favorites");
  list.innerHTML = "";
  for (const fav of favs) {
    const li = document.createElement("li");
    const open = document.createElement("button");
    open.textContent = fav.name;
    open.onclick = async () => {
      render(await (await fetch(`/api/favorites/${fav.id}/open`, {method: "POST"})).json());
    };
    const del = document.createElement("button");
    del.textContent = "Remove";
    del.onclick = async () => {
      await fetch(`/api/favorites/${fav.id}`, {method: "DELETE"});
      loadFavorites();
    };
    li.append(open, " ", del);
    list.append(li);
  }
}

$("search").onsubmit = async (e) => {
  e.preventDefault();
  if (!$("city").value.trim()) return;
  $("submit").disabled = true;
  $("submit").textContent = "Searching...";
  const resp = await fetch("/api/search", {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    body: JSON.stringify({city: $("city").value}),
  });
  render((await resp.json()).state);
};

$("star").onclick = async () => {
  await fetch("/api/favorites", {method: "POST"});
  loadFavorites();
};

fetch("/api/state").then((r) => r.json()).then(render);
loadFavorites();
</script>
</body>
</html>
"""
