import matplotlib.pyplot as plt
import numpy as np


def _save(fig, save_path):
    if save_path is not None:
        fig.savefig(save_path, dpi=300, bbox_inches='tight')


def plot_niche_surfaces(grid, service_values, titles=None, cmap='viridis', save_path=None):
    """Plots one niche response surface per service over the environmental grid."""
    n = len(service_values)
    fig, axes = plt.subplots(1, n, figsize=(5 * n, 4.5), squeeze=False)
    axes = axes.flatten()
    extent = [grid.axis_e2[0], grid.axis_e2[-1], grid.axis_e1[0], grid.axis_e1[-1]]

    for i, (ax, values) in enumerate(zip(axes, service_values)):
        im = ax.imshow(grid.reshape(values), cmap=cmap, origin='lower', extent=extent)
        ax.set_title(titles[i] if titles else f"Service {i + 1}")
        ax.set_xlabel("e2")
        ax.set_ylabel("e1")
        fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)

    plt.tight_layout()
    _save(fig, save_path)
    return fig, axes


def plot_probability_surface(surface, sigma=None, save_path=None):
    fig, ax = plt.subplots(figsize=(5, 4.5))
    im = ax.imshow(surface, cmap='Greens', origin='lower', interpolation='nearest', vmin=0, vmax=1)
    ax.set_title("Probability surface" if sigma is None else f"Probability surface (last sigma = {sigma:.3f})")
    ax.set_xticks([])
    ax.set_yticks([])
    fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
    _save(fig, save_path)
    return fig, ax


def plot_landscape(landscape, service='s1', save_path=None):
    """Scatter of sampled patches in rank-position space, sized by how often each cell was drawn."""
    counts = landscape.groupby(['e1', 'e2']).agg(n=(service, 'size'), value=(service, 'first')).reset_index()

    fig, ax = plt.subplots(figsize=(6, 5))
    sc = ax.scatter(counts['e2'], counts['e1'], s=30 * counts['n'], c=counts['value'],
                    cmap='viridis', edgecolor='black', linewidth=0.5)
    ax.set_xlim(0, 1.05)
    ax.set_ylim(0, 1.05)
    ax.set_xlabel("e2")
    ax.set_ylabel("e1")
    ax.set_title(f"Sampled patches ({len(landscape)}), coloured by {service}")
    fig.colorbar(sc, ax=ax, label=service)
    ax.grid(True, linestyle='--', linewidth=0.5)
    _save(fig, save_path)
    return fig, ax


def plot_experiment_results(results, services=('s1', 's2'), save_path=None):
    """Histograms of landscape totals per overlap scenario, on a shared scale."""
    scenarios = list(dict.fromkeys(results['scenario']))
    n_cols = 3
    n_rows = (len(scenarios) + n_cols - 1) // n_cols
    fig, axes = plt.subplots(n_rows, n_cols, figsize=(15, n_rows * 4), constrained_layout=True, squeeze=False)
    axes = axes.flatten()

    columns = [f"total_{s}" for s in services]
    bins = np.histogram_bin_edges(results[columns].to_numpy().ravel(), bins=40)
    colors = ['skyblue', 'salmon', 'khaki', 'plum']

    for ax, name in zip(axes, scenarios):
        subset = results[results['scenario'] == name]
        for column, color in zip(columns, colors):
            ax.hist(subset[column], bins=bins, alpha=0.7, label=column.replace('total_', ''),
                    density=True, color=color)
        ax.set_title(f"{name} (overlap {subset['overlap'].iloc[0]:.2f})")

    for i in range(len(scenarios), len(axes)):
        axes[i].set_visible(False)

    handles, labels = axes[0].get_legend_handles_labels()
    fig.legend(handles, labels, loc='upper right')
    fig.suptitle('Total service per landscape by niche overlap', fontsize=18)
    _save(fig, save_path)
    return fig, axes


def plot_service_maps(services, titles=None, cmap='viridis', save_path=None):
    """Plots service rasters side by side, nan pixels left blank."""
    n = len(services)
    fig, axes = plt.subplots(1, n, figsize=(6 * n, 5), squeeze=False)
    axes = axes.flatten()

    for i, (ax, band) in enumerate(zip(axes, services)):
        im = ax.imshow(np.ma.masked_invalid(band), cmap=cmap)
        ax.set_title(titles[i] if titles else f"Service {i + 1}")
        ax.set_xticks([])
        ax.set_yticks([])
        fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)

    plt.tight_layout()
    _save(fig, save_path)
    return fig, axes
