from walktracker.main import main

# Bundled Florence KY route, records + map under out/
if __name__ == "__main__":
    raise SystemExit(main(["--records", "out/points.jsonl", "--map", "out/map.html", "--open"]))
