from pathlib import Path
from time import perf_counter

from c45py import C45Classifier, enable_logging, load_csv

here = Path(__file__).parent

with enable_logging(level="INFO"):
    data = load_csv(here / "play_tennis.csv", label="PlayTennis")
    print({name: t.value for name, t in zip(data.header, data.column_types)})

    clf = C45Classifier(threshold_strategy="midpoint")
    t0 = perf_counter(); clf.fit(data); print(f"fit: {perf_counter()-t0:.3f} s")
    clf.print_tree()
    for rule in clf.export_rules():
        print(rule)

    print(clf.predict([
        {"Outlook": "Sunny", "Temperature": "70", "Humidity": "68", "Wind": "Weak"},
        {"Outlook": "Foggy", "Temperature": "70", "Humidity": "95", "Wind": "Strong"},
        {"Temperature": "70"},
    ]))

    clf.save(here / "play_tennis_model.json")
    try:
        clf.export_graphviz("play_tennis_tree", format="dot")
    except RuntimeError as e:
        print(f"Skipping Graphviz export: {e}")
