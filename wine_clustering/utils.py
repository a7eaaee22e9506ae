import os
import logging
import pandas as pd

LOGGER_NAME = "wine_clustering"
logger = logging.getLogger(LOGGER_NAME)


def style_df(df: pd.DataFrame):
    """
    Apply professional styling to a pandas DataFrame for clear presentation.

    Args:
        df (pd.DataFrame): The DataFrame to style.

    Returns:
        Styler: A styled DataFrame object for display.
    """
    # Only format float columns, leave others (like 'Pipeline') as is
    float_cols = df.select_dtypes(include=['float', 'float64', 'float32']).columns
    format_dict = {col: "{:.3f}" for col in float_cols}
    return df.style.format(format_dict, na_rep="-") \
        .set_table_styles([
            {'selector': 'th', 'props': [('background-color', '#f5f5f5'), ('color', '#222'), ('font-weight', 'bold'), ('border', '1px solid #ccc')]},
            {'selector': 'td', 'props': [('border', '1px solid #ddd'), ('padding', '6px')]}
        ])


def save_plot(fig, path):
    """Save a Plotly or Matplotlib figure to disk and print a confirmation."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    if hasattr(fig, 'write_image'):
        fig.write_image(path)
    else:
        fig.savefig(path, bbox_inches='tight')
    print(f"Plot saved to {path}")


def save_table(df: pd.DataFrame, path, index=True):
    """Write a result table to CSV, creating the parent directory."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    df.to_csv(path, index=index)
    print(f"Table saved to {path}")


def setup_environment(env_path=None, log_path=None, level=logging.INFO):
    """Load environment variables, configure logging and set plotting defaults."""
    import plotly.io as pio
    from dotenv import load_dotenv
    if env_path is None:
        env_path = os.path.join(os.path.dirname(__file__), '..', '.env')
    load_dotenv(env_path)

    handlers = [logging.FileHandler(log_path)] if log_path else [logging.NullHandler()]
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s: %(message)s", handlers=handlers)
    logger.setLevel(level)

    pio.templates.default = "plotly_white"
    pd.set_option('display.max_rows', 100)
    pd.set_option('display.max_columns', 30)


def log_and_print(msg):
    """Print a message and forward it to the project logger."""
    print(msg)
    logger.info(msg)
