"""Cluster a small survey-like table with KModes and KPrototypes.

Run:

    python examples/example.py

"""

import numpy as np

from sklkmodes import KModes, KPrototypes, compute_weights

rng = np.random.RandomState(0)
# three categorical answers coded 0..3, two groups with different habits
group_a = rng.choice(4, size=(40, 3), p=[0.7, 0.1, 0.1, 0.1])
group_b = rng.choice(4, size=(25, 3), p=[0.1, 0.1, 0.1, 0.7])
X_cat = np.vstack([group_a, group_b]).astype(float)

model = KModes(n_clusters=2, init="cao", random_state=0)
labels = model.fit_predict(X_cat)
print("labels:", labels[:20])
print("modes:\n", model.cluster_centroids_)
print("members per cluster:", model.labels_counter_)
print("iterations:", model.n_iter_, "cost:", model.cost_)

# weights favouring attributes with fewer distinct values
print("weights:", compute_weights(X_cat))
weighted = KModes(
    n_clusters=2, metric="weighted_hamming", weights="auto", random_state=0
).fit(X_cat)
print("weighted modes:\n", weighted.cluster_centroids_)

# mixed data: append an income-like numerical column
income = np.concatenate([rng.normal(30, 5, 40), rng.normal(80, 10, 25)])
X_mixed = np.column_stack([X_cat, income])
kp = KPrototypes(n_clusters=2, categorical=[0, 1, 2], random_state=0, verbose=1)
kp.fit(X_mixed)
print("gamma:", kp.gamma_)
print("prototypes (income scaled by its maximum):\n", kp.cluster_centroids_)
print("predicted:", kp.predict(X_mixed[:5]))
print("dissimilarities:\n", kp.transform(X_mixed[:5]))
