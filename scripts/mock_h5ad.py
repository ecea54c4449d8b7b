"""Write the demo files referenced by config/datasets/demo.json."""
from pathlib import Path

import anndata as ad
import numpy as np
import pandas as pd

n_cells = 100
n_genes = 50

rng = np.random.default_rng(0)
X = rng.poisson(lam=1.0, size=(n_cells, n_genes)).astype(np.float32)

cell_ids = [f"cell_{i}" for i in range(n_cells)]
obs = pd.DataFrame(
    {
        "cluster": pd.Categorical(rng.choice(["C0", "C1", "C2"], size=n_cells)),
        "condition": pd.Categorical(rng.choice(["ctrl", "stim"], size=n_cells)),
    },
    index=cell_ids,
)

var = pd.DataFrame(index=[f"gene_{j}" for j in range(n_genes)])

adata = ad.AnnData(X=X, obs=obs, var=var)
adata.obsm["X_umap"] = rng.normal(size=(n_cells, 2))
adata.obsm["X_pca"] = rng.normal(size=(n_cells, 10))

coords = pd.DataFrame(rng.normal(size=(n_cells, 2)), index=cell_ids, columns=["tsne_1", "tsne_2"])

Path("data").mkdir(exist_ok=True)
adata.write_h5ad("data/demo.h5ad")
coords.to_csv("data/demo_coords.csv")
print("wrote data/demo.h5ad", adata.shape, "and data/demo_coords.csv", coords.shape)
