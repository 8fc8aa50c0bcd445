import os
import json
import time
import logging
import numpy as np
from datetime import datetime
from typing import Dict, Any, Optional
from tqdm import tqdm

from vase_params import VaseParameters, VaseParameterStore, parameters_to_json
from vase_generator import VaseMeshGenerator


class VasePipeline:
    def __init__(self, config_path: str = "config.json"):
        self.config = self.load_config(config_path)
        self.setup_logging()
        self.setup_directories()

        self.generator = VaseMeshGenerator(seed=self.config['noise_seed'])
        self.exported_files = []

    def load_config(self, config_path: str):
        default_config = {
            "output_dir": "vase_outputs",
            "log_dir": "logs",
            "stl_ascii": False,
            "noise_seed": None,
            "variant_count": 0,
            "save_parameters": True,
        }

        if config_path and os.path.exists(config_path):
            with open(config_path, 'r') as f:
                user_config = json.load(f)
                default_config.update(user_config)

        return default_config

    def setup_logging(self):
        log_dir = self.config['log_dir']
        os.makedirs(log_dir, exist_ok=True)

        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(f"{log_dir}/vasedesign_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"),
                logging.StreamHandler()
            ]
        )
        self.logger = logging.getLogger("VaseDesign")

    def setup_directories(self):
        output_dir = self.config['output_dir']
        os.makedirs(output_dir, exist_ok=True)
        if not os.path.isdir(output_dir):
            self.logger.error(f"Failed to create directory: {output_dir}")
            raise RuntimeError(f"Cannot create required directory: {output_dir}")
        self.logger.info(f"✅ Directory ready: {output_dir}")

    def generate_and_export(self, params: VaseParameters, name: str = "vase",
                            seed: Optional[int] = None) -> str:
        start_time = time.time()
        vase = self.generator.generate(params, seed=seed)

        stl_path = os.path.join(self.config['output_dir'], f"{name}.stl")
        self.generator.save_stl(vase, stl_path, ascii=self.config['stl_ascii'])
        self.exported_files.append(stl_path)

        if self.config['save_parameters']:
            json_path = os.path.splitext(stl_path)[0] + '_params.json'
            with open(json_path, 'w') as f:
                f.write(parameters_to_json(params))

        self.logger.info(f"💾 {name}: {vase.vertex_count:,} vertices, {vase.face_count:,} faces "
                         f"in {time.time() - start_time:.2f}s (noise seed {self.generator.last_noise_seed})")
        return stl_path

    def run_batch(self, base_params: VaseParameters, variant_count: Optional[int] = None,
                  name: str = "vase", rng: Optional[np.random.Generator] = None) -> Dict[str, Any]:
        """Export the base vase followed by randomised variants of it"""
        if variant_count is None:
            variant_count = self.config['variant_count']
        rng = rng if rng is not None else np.random.default_rng(self.config['noise_seed'])

        self.logger.info(f"🏺 Starting batch: base design + {variant_count} variants")
        start_time = time.time()

        try:
            # randomize overwrites the same fields each time, the rest stays at the base values
            store = VaseParameterStore(base_params)
            designs = [(name, store.parameters)]
            for i in range(variant_count):
                designs.append((f"{name}_variant_{i + 1:03d}", store.randomize_parameters(rng)))

            stl_files = []
            with tqdm(total=len(designs), desc="🏺 Generating vases") as pbar:
                for design_name, params in designs:
                    pbar.set_description(f"🏺 {design_name}")
                    stl_files.append(self.generate_and_export(params, design_name))
                    pbar.update(1)

        except Exception as e:
            self.logger.error(f"💥 Batch failed: {str(e)}")
            raise

        total_time = time.time() - start_time
        self.logger.info(f"✅ Batch completed in {total_time:.2f}s")

        return {
            'designs_generated': len(stl_files),
            'stl_files': stl_files,
            'output_dir': self.config['output_dir'],
            'runtime_seconds': total_time,
            'formula_cache': {
                'hits': self.generator.formula_cache.hits,
                'misses': self.generator.formula_cache.misses,
            },
        }
